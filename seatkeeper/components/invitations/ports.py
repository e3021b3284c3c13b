"""
Invitations component - Port interfaces.
"""

from __future__ import annotations

from seatkeeper.components.codes import RandomSourcePort
from seatkeeper.ports.clock import ClockPort
from seatkeeper.ports.email import EmailPort
from seatkeeper.ports.store import TransactionalStorePort

__all__ = [
    "ClockPort",
    "EmailPort",
    "RandomSourcePort",
    "TransactionalStorePort",
]
