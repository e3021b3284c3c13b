"""
Codes component - Invitation code generation.
"""

from .component import generate_invitation_code, is_well_formed_code, normalize_code
from .models import CODE_ALPHABET, CODE_LENGTH
from .ports import RandomSourcePort

__all__ = [
    # Entry points
    "generate_invitation_code",
    "is_well_formed_code",
    "normalize_code",
    # Constants
    "CODE_ALPHABET",
    "CODE_LENGTH",
    # Ports
    "RandomSourcePort",
]
