"""
Club roles and the seats they consume.

The role to seat-category mapping is fixed: club admins use no paid seat,
coaches and admin coaches share the coach seats, view-only users use the
view-only seats.
"""

from __future__ import annotations

from dataclasses import dataclass

from seatkeeper.domain.entities import ClubRole, SeatCategory


@dataclass(frozen=True)
class RoleConfig:
    label: str
    description: str
    seat_category: SeatCategory | None

    @property
    def uses_seat(self) -> bool:
        return self.seat_category is not None


ROLE_CONFIG: dict[ClubRole, RoleConfig] = {
    "club_admin": RoleConfig(
        label="Club Admin",
        description="Admin portal only. No mobile app. No paid seat.",
        seat_category=None,
    ),
    "club_admin_coach": RoleConfig(
        label="Club Admin Coach",
        description="Admin portal + mobile app. Uses 1 coach seat.",
        seat_category="coach",
    ),
    "coach": RoleConfig(
        label="Coach",
        description="Mobile app only. Uses 1 coach seat.",
        seat_category="coach",
    ),
    "view_only": RoleConfig(
        label="View Only",
        description="Mobile app with limited access. Uses 1 view-only seat.",
        seat_category="view_only",
    ),
}

# Display order for invitation forms
INVITABLE_ROLES: tuple[ClubRole, ...] = ("club_admin_coach", "club_admin", "coach", "view_only")

# Roles a club can be onboarded with
ADMIN_ROLES: tuple[ClubRole, ...] = ("club_admin", "club_admin_coach")

CATEGORY_LABELS: dict[SeatCategory, str] = {
    "coach": "coaches",
    "view_only": "view-only users",
}


def seat_category_for(role: str) -> SeatCategory | None:
    """Seat category consumed by a role; None for roles outside seat accounting."""
    config = ROLE_CONFIG.get(role)  # type: ignore[call-overload]
    return config.seat_category if config else None


def role_label(role: str) -> str:
    if role == "super_admin":
        return "Super Admin"
    config = ROLE_CONFIG.get(role)  # type: ignore[call-overload]
    return config.label if config else role


def role_description(role: str) -> str:
    config = ROLE_CONFIG.get(role)  # type: ignore[call-overload]
    return config.description if config else ""
