"""
Expiry component - Port interfaces.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class RedeemableRecord(Protocol):
    """The invitation fields the policy reads."""

    @property
    def active(self) -> bool: ...

    @property
    def uses_count(self) -> int: ...

    @property
    def max_uses(self) -> int: ...

    @property
    def expires_at(self) -> datetime: ...
