"""
Onboarding component - Club creation with its first admin invitations.

The club record and the admin invitations are written in one club
transaction: if an admin invitation does not fit the caps being set, no
club is left behind.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from seatkeeper.adapters.repos import Repos
from seatkeeper.components.invitations import (
    InvitationIssuer,
    Invitee,
    IssuedInvitation,
    IssueInvitationsInput,
    club_scope,
    validate_issue_input,
)
from seatkeeper.domain.entities import Club, Invitation
from seatkeeper.domain.errors import InvalidInputError, QuotaExceededError, SeatkeeperError
from seatkeeper.domain.roles import ADMIN_ROLES, role_label
from seatkeeper.domain.validation import FieldError, required_text_error
from seatkeeper.ports.store import DocumentExistsError, StoreError

from .models import OnboardClubInput, OnboardClubOutput
from .ports import IdFactoryPort, TransactionalStorePort

logger = logging.getLogger(__name__)


def _new_club_id() -> str:
    return uuid4().hex


def _cap_error(value: int | None, field: str, label: str) -> FieldError | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return FieldError(code=f"{field}_invalid", message=f"{label} must be zero or more", field=field)
    return None


def validate_onboarding(inp: OnboardClubInput) -> list[FieldError]:
    errors: list[FieldError] = []

    err = required_text_error(inp.club_name, "club_name", "Club name")
    if err:
        errors.append(err)

    if not [s for s in inp.sports if s and s.strip()]:
        errors.append(FieldError(code="sports_required", message="Select at least one sport", field="sports"))

    if not inp.admins:
        errors.append(
            FieldError(code="admins_required", message="At least one club admin is required", field="admins")
        )
    for i, admin in enumerate(inp.admins):
        if admin.role not in ADMIN_ROLES:
            errors.append(
                FieldError(
                    code="admin_role_invalid",
                    message=f"{role_label(admin.role)} cannot be invited as a club administrator",
                    field=f"admins[{i}].role",
                )
            )

    for cap_err in (
        _cap_error(inp.max_coach_accounts, "max_coach_accounts", "Coach account limit"),
        _cap_error(inp.max_view_only_users, "max_view_only_users", "View-only user limit"),
    ):
        if cap_err:
            errors.append(cap_err)
    return errors


class ClubOnboarder:
    def __init__(
        self,
        store: TransactionalStorePort,
        issuer: InvitationIssuer,
        id_factory: IdFactoryPort | None = None,
    ) -> None:
        self._store = store
        self._issuer = issuer
        self._id_factory = id_factory or _new_club_id

    async def onboard(self, inp: OnboardClubInput) -> tuple[Club, list[Invitation]]:
        """
        Create a club awaiting its admins' signup and invite those admins.

        Raises:
            InvalidInputError: bad club data or admin list, or a taken club id
            QuotaExceededError: the caps cannot hold the admin coaches
            StoreUnavailableError: nothing was written
        """
        errors = validate_onboarding(inp)
        club_id = (inp.club_id or "").strip() or self._id_factory()
        issue_input = IssueInvitationsInput(
            club_id=club_id,
            club_name=inp.club_name,
            invitees=list(inp.admins),
            member_invitation=False,
        )
        admins: list[Invitee] = []
        if inp.admins:
            try:
                admins = validate_issue_input(issue_input, self._issuer.config.max_batch_size)
            except InvalidInputError as e:
                # Club fields were checked above; report invitee problems against admins
                errors.extend(
                    replace(err, field=err.field.replace("invitees", "admins", 1))
                    for err in e.errors
                    if err.field and err.field.startswith("invitees")
                )
        if errors:
            raise InvalidInputError(errors)

        club = Club(
            id=club_id,
            name=inp.club_name.strip(),
            sports=[s.strip() for s in inp.sports if s and s.strip()],
            max_coach_accounts=inp.max_coach_accounts,
            max_view_only_users=inp.max_view_only_users,
            status="pending_admin_signup",
            created_at=self._issuer.clock.now_utc(),
        )

        async with self._store.transaction(club_scope(club_id)) as tx:
            repos = Repos.bind(tx)
            try:
                await repos.clubs.create(club)
            except DocumentExistsError as e:
                raise InvalidInputError(
                    [FieldError(code="club_id_taken", message=f"Club {club_id} already exists", field="club_id")]
                ) from e
            invitations = await self._issuer.issue_within(repos, issue_input, admins)

        logger.info("Onboarded club %s with %d admin invitations", club_id, len(invitations))
        return club, invitations


async def run_onboard(inp: OnboardClubInput, onboarder: ClubOnboarder) -> OnboardClubOutput:
    try:
        club, invitations = await onboarder.onboard(inp)
    except InvalidInputError as e:
        return OnboardClubOutput(error=str(e), errors=e.errors)
    except QuotaExceededError as e:
        return OnboardClubOutput(error=str(e), quota_categories=e.categories)
    except (SeatkeeperError, StoreError) as e:
        return OnboardClubOutput(error=str(e))

    return OnboardClubOutput(
        club=club,
        invitations=[IssuedInvitation.from_invitation(inv) for inv in invitations],
        success=True,
    )
