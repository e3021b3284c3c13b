"""
Expiry component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Literal

RedeemReason = Literal["ok", "expired", "exhausted", "inactive"]
InvitationStatus = Literal["active", "redeemed", "expired", "deactivated"]

# Fixed issuance policy
INVITATION_LIFETIME = timedelta(days=7)

REASON_STATUS: dict[RedeemReason, InvitationStatus] = {
    "ok": "active",
    "exhausted": "redeemed",
    "inactive": "deactivated",
    "expired": "expired",
}

REASON_MESSAGES: dict[RedeemReason, str] = {
    "ok": "Invitation code is valid",
    "expired": "This invitation code has expired. Please contact your club administrator.",
    "exhausted": "This invitation code has already been used.",
    "inactive": "This invitation code is inactive. Please contact your club administrator.",
}


@dataclass(frozen=True)
class Redeemability:
    """Outcome of checking an invitation against the clock."""

    ok: bool
    reason: RedeemReason
    status: InvitationStatus

    @property
    def message(self) -> str:
        return REASON_MESSAGES[self.reason]
