"""
Expiry component - Invitation redeemability and status.
"""

from .component import compute_expires_at, invitation_status, is_redeemable
from .models import (
    INVITATION_LIFETIME,
    REASON_MESSAGES,
    InvitationStatus,
    Redeemability,
    RedeemReason,
)
from .ports import RedeemableRecord

__all__ = [
    # Entry points
    "is_redeemable",
    "invitation_status",
    "compute_expires_at",
    # Models
    "Redeemability",
    "RedeemReason",
    "InvitationStatus",
    "REASON_MESSAGES",
    # Constants
    "INVITATION_LIFETIME",
    # Ports
    "RedeemableRecord",
]
