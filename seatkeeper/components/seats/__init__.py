"""
Seats component - Subscription seat accounting per club.
"""

from .component import (
    SeatAccountant,
    check_request,
    count_commitments,
    run_usage,
    run_validate,
)
from .models import (
    ClubSeatsOutput,
    SeatUsage,
    SeatValidationInput,
    SeatValidationOutput,
)
from .ports import ClubReaderPort, InvitationReaderPort, MemberReaderPort

__all__ = [
    # Entry points
    "run_validate",
    "run_usage",
    "SeatAccountant",
    "check_request",
    "count_commitments",
    # Input models
    "SeatValidationInput",
    # Output models
    "SeatValidationOutput",
    "SeatUsage",
    "ClubSeatsOutput",
    # Ports
    "ClubReaderPort",
    "MemberReaderPort",
    "InvitationReaderPort",
]
