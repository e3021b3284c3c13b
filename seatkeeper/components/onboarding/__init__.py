"""
Onboarding component - New clubs and their first administrators.
"""

from .component import ClubOnboarder, run_onboard, validate_onboarding
from .models import OnboardClubInput, OnboardClubOutput
from .ports import IdFactoryPort

__all__ = [
    # Entry points
    "run_onboard",
    "ClubOnboarder",
    "validate_onboarding",
    # Input models
    "OnboardClubInput",
    # Output models
    "OnboardClubOutput",
    # Ports
    "IdFactoryPort",
]
