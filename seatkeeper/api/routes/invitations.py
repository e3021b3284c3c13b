"""Routes for issuing and managing club invitation codes."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from seatkeeper.api.deps import get_issuer, get_registry
from seatkeeper.api.errors import http_error
from seatkeeper.components.expiry import InvitationStatus
from seatkeeper.components.invitations import (
    InvitationIssuer,
    InvitationRegistry,
    InvitationView,
    IssuedInvitation,
    IssueInvitationsInput,
    Invitee,
)
from seatkeeper.domain.errors import SeatkeeperError
from seatkeeper.ports.store import StoreError

router = APIRouter()


# --- Request/Response Models ---


class InviteeRequest(BaseModel):
    email: str
    # Checked by the issuer so unknown roles come back as field errors
    role: str
    first_name: str | None = None
    last_name: str | None = None

    def to_invitee(self) -> Invitee:
        return Invitee(
            email=self.email,
            role=self.role,  # type: ignore[arg-type]
            first_name=self.first_name,
            last_name=self.last_name,
        )


class IssueInvitationsRequest(BaseModel):
    club_name: str
    invitees: list[InviteeRequest]
    team_id: str | None = None
    member_invitation: bool = True


class IssuedInvitationResponse(BaseModel):
    code: str
    email: str
    role: str
    expires_at: datetime
    team_id: str | None

    @classmethod
    def from_issued(cls, issued: IssuedInvitation) -> "IssuedInvitationResponse":
        return cls(
            code=issued.code,
            email=issued.email,
            role=issued.role,
            expires_at=issued.expires_at,
            team_id=issued.team_id,
        )


class IssueInvitationsResponse(BaseModel):
    invitations: list[IssuedInvitationResponse]
    emails_failed: list[str]


class InvitationResponse(BaseModel):
    code: str
    club_id: str
    club_name: str
    team_id: str | None
    intended_role: str
    email: str
    first_name: str | None
    last_name: str | None
    max_uses: int
    uses_count: int
    active: bool
    status: InvitationStatus
    redeemable: bool
    message: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_view(cls, view: InvitationView) -> "InvitationResponse":
        inv = view.invitation
        return cls(
            code=inv.code,
            club_id=inv.club_id,
            club_name=inv.club_name,
            team_id=inv.team_id,
            intended_role=inv.intended_role,
            email=inv.admin_email,
            first_name=inv.first_name,
            last_name=inv.last_name,
            max_uses=inv.max_uses,
            uses_count=inv.uses_count,
            active=inv.active,
            status=view.status,
            redeemable=view.redeemable,
            message=view.message,
            created_at=inv.created_at,
            expires_at=inv.expires_at,
        )


class InvitationListResponse(BaseModel):
    items: list[InvitationResponse]
    total: int


# --- Routes ---


@router.post(
    "/clubs/{club_id}/invitations",
    response_model=IssueInvitationsResponse,
    status_code=201,
)
async def issue_invitations(
    club_id: str,
    data: IssueInvitationsRequest,
    issuer: InvitationIssuer = Depends(get_issuer),
) -> IssueInvitationsResponse:
    """Issue one invitation code per invitee, all or nothing."""
    inp = IssueInvitationsInput(
        club_id=club_id,
        club_name=data.club_name,
        invitees=[i.to_invitee() for i in data.invitees],
        team_id=data.team_id,
        member_invitation=data.member_invitation,
    )
    try:
        invitations = await issuer.issue(inp)
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e

    emails_failed = issuer.notify(invitations)
    return IssueInvitationsResponse(
        invitations=[
            IssuedInvitationResponse.from_issued(IssuedInvitation.from_invitation(inv)) for inv in invitations
        ],
        emails_failed=emails_failed,
    )


@router.get("/clubs/{club_id}/invitations", response_model=InvitationListResponse)
async def list_invitations(
    club_id: str,
    registry: InvitationRegistry = Depends(get_registry),
) -> InvitationListResponse:
    """List a club's invitations, newest first."""
    try:
        views = await registry.list_invitations(club_id)
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e
    return InvitationListResponse(items=[InvitationResponse.from_view(v) for v in views], total=len(views))


@router.post("/clubs/{club_id}/invitations/{code}/deactivate", response_model=InvitationResponse)
async def deactivate_invitation(
    club_id: str,
    code: str,
    registry: InvitationRegistry = Depends(get_registry),
) -> InvitationResponse:
    try:
        view = await registry.deactivate_invitation(club_id, code)
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e
    return InvitationResponse.from_view(view)


@router.get("/invitations/{code}", response_model=InvitationResponse)
async def check_invitation(
    code: str,
    registry: InvitationRegistry = Depends(get_registry),
) -> InvitationResponse:
    """Look up a code before signup."""
    try:
        view = await registry.check_invitation(code)
    except (SeatkeeperError, StoreError) as e:
        raise http_error(e) from e
    return InvitationResponse.from_view(view)
