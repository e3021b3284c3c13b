"""
Invitations component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from seatkeeper.components.expiry import REASON_MESSAGES, InvitationStatus, RedeemReason
from seatkeeper.domain.entities import ClubRole, Invitation
from seatkeeper.domain.validation import FieldError

# --- Configuration ---


@dataclass(frozen=True)
class IssuanceConfig:
    """Issuance settings; loaded from the `issuance` section of rules.yaml."""

    serialize_per_club: bool = True
    collision_retry_limit: int = 5
    max_batch_size: int = 50
    send_member_emails: bool = False
    signup_url: str = "http://localhost:3000/signup"


# --- Input Models ---


@dataclass(frozen=True)
class Invitee:
    """One person to invite."""

    email: str
    role: ClubRole
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class IssueInvitationsInput:
    """Input for issuing a batch of invitations for one club."""

    club_id: str
    club_name: str
    invitees: list[Invitee]
    team_id: str | None = None
    # Invitations sent from the members screen get an email with their code
    member_invitation: bool = True


@dataclass(frozen=True)
class DeactivateInvitationInput:
    club_id: str
    code: str


# --- Output Models ---


@dataclass(frozen=True)
class IssuedInvitation:
    """What the admin sees and copies after issuance."""

    code: str
    email: str
    role: ClubRole
    expires_at: datetime
    team_id: str | None = None

    @classmethod
    def from_invitation(cls, invitation: Invitation) -> IssuedInvitation:
        return cls(
            code=invitation.code,
            email=invitation.admin_email,
            role=invitation.intended_role,
            expires_at=invitation.expires_at,
            team_id=invitation.team_id,
        )


@dataclass
class IssueInvitationsOutput:
    """Output from batch issuance."""

    invitations: list[IssuedInvitation] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)
    # Seat categories whose cap rejected the batch
    quota_categories: list[str] = field(default_factory=list)
    # Codes durably written before a store failure
    persisted_codes: list[str] = field(default_factory=list)
    emails_failed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InvitationView:
    """An invitation together with its status at read time."""

    invitation: Invitation
    status: InvitationStatus
    reason: RedeemReason

    @property
    def redeemable(self) -> bool:
        return self.reason == "ok"

    @property
    def message(self) -> str:
        return REASON_MESSAGES[self.reason]


@dataclass
class InvitationListOutput:
    items: list[InvitationView] = field(default_factory=list)
    total: int = 0
    success: bool = True
    error: str | None = None


@dataclass
class InvitationOperationOutput:
    """Output from lookup and deactivation."""

    view: InvitationView | None = None
    success: bool = False
    error: str | None = None
