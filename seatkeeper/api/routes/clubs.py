"""Routes for club onboarding and seat usage."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from seatkeeper.api.deps import get_accountant, get_onboarder
from seatkeeper.api.errors import http_error
from seatkeeper.api.routes.invitations import IssuedInvitationResponse, InviteeRequest
from seatkeeper.components.invitations import IssuedInvitation
from seatkeeper.components.onboarding import ClubOnboarder, OnboardClubInput
from seatkeeper.components.seats import SeatAccountant, SeatUsage
from seatkeeper.domain.entities import Club, ClubStatus
from seatkeeper.domain.errors import SeatkeeperError
from seatkeeper.ports.store import StoreError

router = APIRouter()


# --- Request/Response Models ---


class OnboardClubRequest(BaseModel):
    club_name: str
    sports: list[str]
    admins: list[InviteeRequest]
    max_coach_accounts: int | None = None
    max_view_only_users: int | None = None
    club_id: str | None = None


class ClubResponse(BaseModel):
    id: str
    name: str
    sports: list[str]
    max_coach_accounts: int | None
    max_view_only_users: int | None
    status: ClubStatus
    created_at: datetime

    @classmethod
    def from_club(cls, club: Club) -> "ClubResponse":
        return cls(
            id=club.id,
            name=club.name,
            sports=club.sports,
            max_coach_accounts=club.max_coach_accounts,
            max_view_only_users=club.max_view_only_users,
            status=club.status,
            created_at=club.created_at,
        )


class OnboardClubResponse(BaseModel):
    club: ClubResponse
    invitations: list[IssuedInvitationResponse]


class SeatUsageResponse(BaseModel):
    category: str
    cap: int | None
    members: int
    pending: int
    committed: int
    remaining: int | None

    @classmethod
    def from_usage(cls, usage: SeatUsage) -> "SeatUsageResponse":
        return cls(
            category=usage.category,
            cap=usage.cap,
            members=usage.members,
            pending=usage.pending,
            committed=usage.committed,
            remaining=usage.remaining,
        )


class ClubSeatsResponse(BaseModel):
    club_id: str
    usage: list[SeatUsageResponse]


class SeatValidateRequest(BaseModel):
    category: str
    additional_count: int = 1


class SeatValidateResponse(BaseModel):
    valid: bool
    category: str
    requested: int
    reason: str | None
    usage: SeatUsageResponse | None


# --- Routes ---


@router.post("", response_model=OnboardClubResponse, status_code=201)
async def onboard_club(
    data: OnboardClubRequest,
    onboarder: ClubOnboarder = Depends(get_onboarder),
) -> OnboardClubResponse:
    """Create a club awaiting admin signup, with its admin invitations."""
    inp = OnboardClubInput(
        club_name=data.club_name,
        sports=data.sports,
        admins=[a.to_invitee() for a in data.admins],
        max_coach_accounts=data.max_coach_accounts,
        max_view_only_users=data.max_view_only_users,
        club_id=data.club_id,
    )
    try:
        club, invitations = await onboarder.onboard(inp)
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e

    return OnboardClubResponse(
        club=ClubResponse.from_club(club),
        invitations=[
            IssuedInvitationResponse.from_issued(IssuedInvitation.from_invitation(inv)) for inv in invitations
        ],
    )


@router.get("/{club_id}/seats", response_model=ClubSeatsResponse)
async def get_seats(
    club_id: str,
    accountant: SeatAccountant = Depends(get_accountant),
) -> ClubSeatsResponse:
    """Seat usage per category for the subscriptions screen."""
    try:
        usage = await accountant.get_club_usage(club_id)
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e
    return ClubSeatsResponse(
        club_id=club_id,
        usage=[SeatUsageResponse.from_usage(u) for u in usage.values()],
    )


@router.post("/{club_id}/seats/validate", response_model=SeatValidateResponse)
async def validate_seats(
    club_id: str,
    data: SeatValidateRequest,
    accountant: SeatAccountant = Depends(get_accountant),
) -> SeatValidateResponse:
    try:
        result = await accountant.validate_seat_request(
            club_id,
            data.category,  # type: ignore[arg-type]
            data.additional_count,
        )
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e
    return SeatValidateResponse(
        valid=result.valid,
        category=result.category,
        requested=result.requested,
        reason=result.reason,
        usage=SeatUsageResponse.from_usage(result.usage) if result.usage else None,
    )
