"""
Seats component - Subscription seat accounting.

A club's seats in a category are committed either by members holding a role
in that category or by pending invitations (still redeemable) for such a
role. A request for N more seats is valid iff committed + N <= cap; a
missing cap means the category is unlimited.

Counting is read-only. Callers that act on the answer must hold the club's
transaction for the whole check-then-write sequence, otherwise two admins
can both take the last seat.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from seatkeeper.components.expiry import is_redeemable
from seatkeeper.domain.entities import SEAT_CATEGORIES, Club, Invitation, Member, SeatCategory
from seatkeeper.domain.errors import ClubNotFoundError, InvalidInputError, SeatkeeperError
from seatkeeper.domain.roles import CATEGORY_LABELS, seat_category_for
from seatkeeper.domain.validation import FieldError
from seatkeeper.ports.clock import ClockPort

from .models import ClubSeatsOutput, SeatUsage, SeatValidationInput, SeatValidationOutput
from .ports import ClubReaderPort, InvitationReaderPort, MemberReaderPort

logger = logging.getLogger(__name__)

# --- Pure Functions ---


def count_commitments(
    members: Iterable[Member],
    invitations: Iterable[Invitation],
    category: SeatCategory,
    now: datetime,
) -> tuple[int, int]:
    """Return (members, pending invitations) consuming seats of a category."""
    member_count = sum(1 for m in members if seat_category_for(m.role) == category)
    pending_count = sum(
        1
        for inv in invitations
        if seat_category_for(inv.intended_role) == category and is_redeemable(inv, now).ok
    )
    return member_count, pending_count


def check_request(usage: SeatUsage, requested: int) -> SeatValidationOutput:
    """Decide whether `requested` more seats fit the usage snapshot."""
    if requested == 0 or usage.cap is None or usage.committed + requested <= usage.cap:
        return SeatValidationOutput(
            valid=True,
            category=usage.category,
            requested=requested,
            usage=usage,
        )

    label = CATEGORY_LABELS[usage.category]
    reason = (
        f"Cannot add {label}: subscription limit exceeded. "
        f"{usage.committed} of {usage.cap} {usage.category.replace('_', '-')} seats are "
        f"committed ({usage.members} members, {usage.pending} pending invitations) "
        f"and {requested} more were requested."
    )
    return SeatValidationOutput(
        valid=False,
        category=usage.category,
        requested=requested,
        reason=reason,
        usage=usage,
    )


def _validate_request(club_id: str, category: str, additional_count: int) -> None:
    errors: list[FieldError] = []
    if not club_id or not club_id.strip():
        errors.append(FieldError(code="club_id_required", message="Club ID is required", field="club_id"))
    if category not in SEAT_CATEGORIES:
        errors.append(
            FieldError(
                code="category_invalid",
                message=f"Unknown seat category '{category}'",
                field="category",
            )
        )
    if isinstance(additional_count, bool) or not isinstance(additional_count, int) or additional_count < 0:
        errors.append(
            FieldError(
                code="count_invalid",
                message="Requested seat count must be a non-negative integer",
                field="additional_count",
            )
        )
    if errors:
        raise InvalidInputError(errors)


# --- Seat Accountant ---


class SeatAccountant:
    """
    Seat accountant.

    Bind it to repositories opened inside a club transaction to make the
    answer hold until that transaction commits.
    """

    def __init__(
        self,
        clubs: ClubReaderPort,
        members: MemberReaderPort,
        invitations: InvitationReaderPort,
        clock: ClockPort,
    ) -> None:
        self._clubs = clubs
        self._members = members
        self._invitations = invitations
        self._clock = clock

    async def _load_club(self, club_id: str) -> Club:
        club = await self._clubs.get(club_id)
        if club is None:
            raise ClubNotFoundError(club_id)
        return club

    async def _usage_for(self, club: Club, categories: Iterable[SeatCategory]) -> dict[SeatCategory, SeatUsage]:
        members = await self._members.list_by_club(club.id)
        invitations = await self._invitations.list_by_club(club.id)
        now = self._clock.now_utc()

        usage: dict[SeatCategory, SeatUsage] = {}
        for category in categories:
            member_count, pending_count = count_commitments(members, invitations, category, now)
            usage[category] = SeatUsage(
                category=category,
                cap=club.seat_cap(category),
                members=member_count,
                pending=pending_count,
            )
        return usage

    async def get_usage(self, club_id: str, category: SeatCategory) -> SeatUsage:
        _validate_request(club_id, category, 0)
        club = await self._load_club(club_id)
        return (await self._usage_for(club, [category]))[category]

    async def get_club_usage(self, club_id: str) -> dict[SeatCategory, SeatUsage]:
        _validate_request(club_id, "coach", 0)
        club = await self._load_club(club_id)
        return await self._usage_for(club, SEAT_CATEGORIES)

    async def validate_seat_request(
        self,
        club_id: str,
        category: SeatCategory,
        additional_count: int,
    ) -> SeatValidationOutput:
        """
        Check whether `additional_count` more seats of `category` fit.

        Raises:
            InvalidInputError: blank club id, unknown category, negative count
            ClubNotFoundError: no such club
        """
        _validate_request(club_id, category, additional_count)
        club = await self._load_club(club_id)

        if club.seat_cap(category) is None:
            return SeatValidationOutput(valid=True, category=category, requested=additional_count)

        usage = (await self._usage_for(club, [category]))[category]
        result = check_request(usage, additional_count)
        if not result.valid:
            logger.info(
                "Seat request rejected: club=%s category=%s committed=%d cap=%s requested=%d",
                club_id,
                category,
                usage.committed,
                usage.cap,
                additional_count,
            )
        return result


# --- Shell Layer Functions ---


async def run_validate(inp: SeatValidationInput, accountant: SeatAccountant) -> SeatValidationOutput:
    """Validate a seat request, reporting errors as an invalid result."""
    try:
        return await accountant.validate_seat_request(inp.club_id, inp.category, inp.additional_count)
    except SeatkeeperError as e:
        return SeatValidationOutput(
            valid=False,
            category=inp.category,
            requested=inp.additional_count,
            reason=str(e),
        )


async def run_usage(club_id: str, accountant: SeatAccountant) -> ClubSeatsOutput:
    try:
        usage = await accountant.get_club_usage(club_id)
    except SeatkeeperError as e:
        return ClubSeatsOutput(club_id=club_id, success=False, error=str(e))
    return ClubSeatsOutput(club_id=club_id, usage=usage)
