"""
Seats component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from seatkeeper.domain.entities import SeatCategory


@dataclass(frozen=True)
class SeatUsage:
    """Seat commitments of one category in one club."""

    category: SeatCategory
    cap: int | None  # None means uncapped
    members: int
    pending: int

    @property
    def committed(self) -> int:
        return self.members + self.pending

    @property
    def remaining(self) -> int | None:
        if self.cap is None:
            return None
        return max(self.cap - self.committed, 0)


@dataclass(frozen=True)
class SeatValidationInput:
    """Input for checking whether more seats fit under a club's cap."""

    club_id: str
    category: SeatCategory
    additional_count: int = 1


@dataclass(frozen=True)
class SeatValidationOutput:
    """Output from a seat check."""

    valid: bool
    category: SeatCategory
    requested: int
    reason: str | None = None
    usage: SeatUsage | None = None


@dataclass
class ClubSeatsOutput:
    """Seat usage summary for every category of a club."""

    club_id: str
    usage: dict[SeatCategory, SeatUsage] = field(default_factory=dict)
    success: bool = True
    error: str | None = None
