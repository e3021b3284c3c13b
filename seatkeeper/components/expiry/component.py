"""
Expiry component - Invitation redeemability.

Pure functions, no I/O. An invitation is redeemable iff it is active, has
uses left and the current time is strictly before expires_at.

When several conditions fail at once the reason reported is, in order:
exhausted, inactive, expired. A redeemed code is usually also inactive and,
a week later, expired; "exhausted" is the most informative of the three.
"""

from __future__ import annotations

from datetime import UTC, datetime

from .models import INVITATION_LIFETIME, REASON_STATUS, InvitationStatus, Redeemability, RedeemReason
from .ports import RedeemableRecord


def _as_utc(dt: datetime) -> datetime:
    # Naive datetimes are treated as UTC
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


def compute_expires_at(created_at: datetime) -> datetime:
    return _as_utc(created_at) + INVITATION_LIFETIME


def is_redeemable(invitation: RedeemableRecord, now: datetime) -> Redeemability:
    """Whether the invitation can be redeemed at `now`, with the reason tag."""
    reason: RedeemReason
    if invitation.uses_count >= invitation.max_uses:
        reason = "exhausted"
    elif not invitation.active:
        reason = "inactive"
    elif _as_utc(now) >= _as_utc(invitation.expires_at):
        reason = "expired"
    else:
        reason = "ok"

    return Redeemability(ok=reason == "ok", reason=reason, status=REASON_STATUS[reason])


def invitation_status(invitation: RedeemableRecord, now: datetime) -> InvitationStatus:
    return is_redeemable(invitation, now).status
