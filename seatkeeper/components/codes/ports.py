"""
Codes component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSourcePort(Protocol):
    """Uniform random choice; random.Random and secrets.SystemRandom both fit."""

    def choice(self, seq: Sequence[T]) -> T:
        ...
