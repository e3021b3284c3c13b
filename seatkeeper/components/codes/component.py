"""
Codes component - Invitation code generation.

Pure functions. Uniqueness is not checked here: callers persist codes with a
create-if-absent write and regenerate on collision.
"""

from __future__ import annotations

import secrets

from .models import CODE_ALPHABET, CODE_LENGTH
from .ports import RandomSourcePort

_system_random = secrets.SystemRandom()


def generate_invitation_code(rng: RandomSourcePort | None = None) -> str:
    """Draw CODE_LENGTH symbols uniformly from CODE_ALPHABET."""
    source = rng or _system_random
    return "".join(source.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(code: str) -> str:
    """Codes typed by people may carry whitespace or lower case."""
    return code.strip().upper()


def is_well_formed_code(code: str) -> bool:
    return len(code) == CODE_LENGTH and all(c in CODE_ALPHABET for c in code)
