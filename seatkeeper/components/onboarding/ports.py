"""
Onboarding component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from seatkeeper.ports.clock import ClockPort
from seatkeeper.ports.store import TransactionalStorePort


class IdFactoryPort(Protocol):
    """Produces ids for new clubs."""

    def __call__(self) -> str:
        ...


__all__ = ["ClockPort", "IdFactoryPort", "TransactionalStorePort"]
