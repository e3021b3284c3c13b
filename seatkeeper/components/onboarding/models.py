"""
Onboarding component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from seatkeeper.components.invitations import Invitee, IssuedInvitation
from seatkeeper.domain.entities import Club
from seatkeeper.domain.validation import FieldError


@dataclass(frozen=True)
class OnboardClubInput:
    """A new club, its subscription caps and its first administrators."""

    club_name: str
    sports: list[str]
    admins: list[Invitee]
    max_coach_accounts: int | None = None
    max_view_only_users: int | None = None
    # Generated when omitted
    club_id: str | None = None


@dataclass
class OnboardClubOutput:
    club: Club | None = None
    invitations: list[IssuedInvitation] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)
    quota_categories: list[str] = field(default_factory=list)
