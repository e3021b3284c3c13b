"""
InvitationIssuer - Batch invitation issuance under seat caps.

A batch is checked against the club's caps and written as one unit: every
seat category is validated before the first code is generated, and a
quota failure in any category rejects the whole batch.

With serialize_per_club enabled (the default) the check and the writes run
inside one store transaction scoped to the club, so concurrent batches for
the same club are ordered and a store failure leaves nothing behind.
Disabling it runs the same steps directly against the store; that mode
exists to reproduce the over-issue race and must not be used in production.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from seatkeeper.adapters.repos import Repos
from seatkeeper.components.codes import generate_invitation_code, is_well_formed_code, normalize_code
from seatkeeper.components.expiry import compute_expires_at, is_redeemable
from seatkeeper.components.seats import SeatAccountant, SeatValidationOutput
from seatkeeper.domain.entities import Invitation, SeatCategory
from seatkeeper.domain.errors import (
    ClubNotFoundError,
    CodeCollisionError,
    InvalidInputError,
    InvitationNotFoundError,
    QuotaExceededError,
)
from seatkeeper.domain.roles import ROLE_CONFIG, seat_category_for
from seatkeeper.domain.validation import FieldError, email_error, normalize_email, required_text_error
from seatkeeper.ports.store import DocumentExistsError, StoreUnavailableError

from .models import InvitationView, IssuanceConfig, IssueInvitationsInput, Invitee
from .notify import InvitationMailer
from .ports import ClockPort, RandomSourcePort, TransactionalStorePort

logger = logging.getLogger(__name__)


def club_scope(club_id: str) -> str:
    """Transaction scope shared by every writer of a club's seats."""
    return f"club:{club_id}"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# --- Validation Functions ---


def validate_issue_input(inp: IssueInvitationsInput, max_batch_size: int) -> list[Invitee]:
    """
    Validate a batch and return its invitees normalized.

    Raises:
        InvalidInputError: with one FieldError per problem found
    """
    errors: list[FieldError] = []

    for err in (
        required_text_error(inp.club_id, "club_id", "Club ID"),
        required_text_error(inp.club_name, "club_name", "Club name"),
    ):
        if err:
            errors.append(err)

    if not inp.invitees:
        errors.append(
            FieldError(code="invitees_required", message="At least one invitee is required", field="invitees")
        )
    elif len(inp.invitees) > max_batch_size:
        errors.append(
            FieldError(
                code="batch_too_large",
                message=f"At most {max_batch_size} invitations can be issued at once",
                field="invitees",
            )
        )

    normalized: list[Invitee] = []
    seen: set[str] = set()
    for i, invitee in enumerate(inp.invitees):
        field = f"invitees[{i}]"
        err = email_error(invitee.email, field=f"{field}.email")
        if err:
            errors.append(err)
            continue
        email = normalize_email(invitee.email)
        if email in seen:
            errors.append(
                FieldError(
                    code="email_duplicate",
                    message=f"{email} appears more than once in this batch",
                    field=f"{field}.email",
                )
            )
            continue
        seen.add(email)

        if invitee.role not in ROLE_CONFIG:
            errors.append(
                FieldError(
                    code="role_invalid",
                    message=f"Unknown role '{invitee.role}'",
                    field=f"{field}.role",
                )
            )
            continue

        normalized.append(
            Invitee(
                email=email,
                role=invitee.role,
                first_name=_clean(invitee.first_name),
                last_name=_clean(invitee.last_name),
            )
        )

    if errors:
        raise InvalidInputError(errors)
    return normalized


def partition_by_category(invitees: Sequence[Invitee]) -> dict[SeatCategory, list[Invitee]]:
    """Group seat-consuming invitees by category. Seatless roles are left out."""
    partitions: dict[SeatCategory, list[Invitee]] = {}
    for invitee in invitees:
        category = seat_category_for(invitee.role)
        if category is not None:
            partitions.setdefault(category, []).append(invitee)
    return partitions


# --- Issuer ---


class InvitationIssuer:
    """Issues invitation batches for clubs."""

    def __init__(
        self,
        store: TransactionalStorePort,
        clock: ClockPort,
        config: IssuanceConfig | None = None,
        rng: RandomSourcePort | None = None,
        mailer: InvitationMailer | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._config = config or IssuanceConfig()
        self._rng = rng
        self._mailer = mailer

    @property
    def config(self) -> IssuanceConfig:
        return self._config

    @property
    def clock(self) -> ClockPort:
        return self._clock

    @asynccontextmanager
    async def club_unit(self, club_id: str) -> AsyncIterator[Repos]:
        """Repositories for one unit of work on a club."""
        if self._config.serialize_per_club:
            async with self._store.transaction(club_scope(club_id)) as tx:
                yield Repos.bind(tx)
        else:
            yield Repos.bind(self._store)

    async def issue(self, inp: IssueInvitationsInput) -> list[Invitation]:
        """
        Issue one invitation per invitee, all or nothing.

        No mail is sent; pass the result to notify().

        Raises:
            InvalidInputError: malformed batch; nothing was read or written
            ClubNotFoundError: no such club
            QuotaExceededError: some category lacks seats; nothing was written
            CodeCollisionError: code generation kept colliding; persisted_codes
                lists what was written before it (always empty in transactional mode)
            StoreUnavailableError: the store failed; persisted_codes lists
                what was durably written (always empty in transactional mode)
        """
        invitees = validate_issue_input(inp, self._config.max_batch_size)
        persisted: list[str] = []

        try:
            async with self.club_unit(inp.club_id) as repos:
                invitations = await self.issue_within(repos, inp, invitees, persisted)
        except StoreUnavailableError as e:
            if self._config.serialize_per_club:
                persisted = []
            logger.error(
                "Invitation batch for club %s failed after %d of %d invitations were persisted: %s",
                inp.club_id,
                len(persisted),
                len(invitees),
                e,
            )
            raise StoreUnavailableError(
                f"Invitation batch failed; {len(persisted)} of {len(invitees)} invitations were persisted",
                persisted_codes=persisted,
            ) from e
        except CodeCollisionError as e:
            if self._config.serialize_per_club:
                raise
            logger.error(
                "Invitation batch for club %s stopped after %d of %d invitations were persisted: %s",
                inp.club_id,
                len(persisted),
                len(invitees),
                e,
            )
            raise CodeCollisionError(e.attempts, persisted_codes=persisted) from e

        by_category = {c: len(g) for c, g in partition_by_category(invitees).items()}
        logger.info("Issued %d invitations for club %s %s", len(invitations), inp.club_id, by_category)
        return invitations

    async def issue_within(
        self,
        repos: Repos,
        inp: IssueInvitationsInput,
        invitees: Sequence[Invitee] | None = None,
        persisted: list[str] | None = None,
    ) -> list[Invitation]:
        """
        Check seats and write a batch through already-bound repositories.

        Callers that open their own club unit (onboarding) use this to add
        invitations to a larger unit of work. Mail is not sent; call
        notify() once the unit has committed.
        """
        if invitees is None:
            invitees = validate_issue_input(inp, self._config.max_batch_size)
        if persisted is None:
            persisted = []

        if await repos.clubs.get(inp.club_id) is None:
            raise ClubNotFoundError(inp.club_id)

        accountant = SeatAccountant(repos.clubs, repos.members, repos.invitations, self._clock)
        failures: list[SeatValidationOutput] = []
        for category, group in partition_by_category(invitees).items():
            result = await accountant.validate_seat_request(inp.club_id, category, len(group))
            if not result.valid:
                failures.append(result)
        if failures:
            raise QuotaExceededError(failures)

        now = self._clock.now_utc()
        expires_at = compute_expires_at(now)
        team_id = _clean(inp.team_id)

        invitations: list[Invitation] = []
        for invitee in invitees:
            draft = Invitation(
                code="",
                club_id=inp.club_id,
                club_name=inp.club_name.strip(),
                team_id=team_id,
                intended_role=invitee.role,
                admin_email=invitee.email,
                first_name=invitee.first_name,
                last_name=invitee.last_name,
                is_member_invitation=inp.member_invitation,
                created_at=now,
                expires_at=expires_at,
            )
            invitation = await self._create_unique(repos, draft)
            persisted.append(invitation.code)
            invitations.append(invitation)
        return invitations

    async def _create_unique(self, repos: Repos, draft: Invitation) -> Invitation:
        limit = self._config.collision_retry_limit
        for attempt in range(1, limit + 1):
            invitation = draft.model_copy(update={"code": generate_invitation_code(self._rng)})
            try:
                return await repos.invitations.create(invitation)
            except DocumentExistsError:
                logger.warning(
                    "Invitation code collision (attempt %d of %d), regenerating",
                    attempt,
                    limit,
                )
        raise CodeCollisionError(limit)

    def notify(self, invitations: Sequence[Invitation]) -> list[str]:
        """
        Mail member invitations. Returns the addresses that could not be reached.

        Failures are logged; the invitations stay issued.
        """
        if self._mailer is None or not self._config.send_member_emails:
            return []

        failed: list[str] = []
        for invitation in invitations:
            if not invitation.is_member_invitation:
                continue
            result = self._mailer.send(invitation)
            if not result.delivered:
                logger.warning(
                    "Invitation email to %s failed (code %s): %s",
                    invitation.admin_email,
                    invitation.code,
                    result.error,
                )
                failed.append(invitation.admin_email)
        return failed


# --- Registry ---


class InvitationRegistry:
    """Lookup, listing and deactivation of issued invitations."""

    def __init__(self, store: TransactionalStorePort, clock: ClockPort) -> None:
        self._store = store
        self._clock = clock

    def _view(self, invitation: Invitation) -> InvitationView:
        verdict = is_redeemable(invitation, self._clock.now_utc())
        return InvitationView(invitation=invitation, status=verdict.status, reason=verdict.reason)

    async def list_invitations(self, club_id: str) -> list[InvitationView]:
        """All of a club's invitations, newest first."""
        err = required_text_error(club_id, "club_id", "Club ID")
        if err:
            raise InvalidInputError([err])
        repos = Repos.bind(self._store)
        if await repos.clubs.get(club_id) is None:
            raise ClubNotFoundError(club_id)
        invitations = await repos.invitations.list_by_club(club_id)
        invitations.sort(key=lambda inv: inv.created_at, reverse=True)
        return [self._view(inv) for inv in invitations]

    async def check_invitation(self, code: str) -> InvitationView:
        """
        Look up a code as a person would type it.

        Raises:
            InvitationNotFoundError: no invitation has this code
        """
        err = required_text_error(code, "code", "Invitation code")
        if err:
            raise InvalidInputError([err])
        code = normalize_code(code)
        if not is_well_formed_code(code):
            raise InvitationNotFoundError(code)
        invitation = await Repos.bind(self._store).invitations.get(code)
        if invitation is None:
            raise InvitationNotFoundError(code)
        return self._view(invitation)

    async def deactivate_invitation(self, club_id: str, code: str) -> InvitationView:
        """
        Stop a code from being redeemed, releasing its pending seat.

        The record is kept. A code belonging to another club is reported as
        not found.
        """
        errors = [
            e
            for e in (
                required_text_error(club_id, "club_id", "Club ID"),
                required_text_error(code, "code", "Invitation code"),
            )
            if e
        ]
        if errors:
            raise InvalidInputError(errors)
        code = normalize_code(code)

        async with self._store.transaction(club_scope(club_id)) as tx:
            repos = Repos.bind(tx)
            invitation = await repos.invitations.get(code)
            if invitation is None or invitation.club_id != club_id:
                raise InvitationNotFoundError(code)
            if invitation.active:
                invitation = invitation.model_copy(update={"active": False})
                await repos.invitations.save(invitation)
                logger.info("Deactivated invitation %s for club %s", code, club_id)
        return self._view(invitation)
