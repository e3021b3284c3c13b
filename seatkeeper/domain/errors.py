"""
Error taxonomy for invitation issuance and seat accounting.

Store-level failures (unavailable store, existing documents) live with the
store port in seatkeeper.ports.store.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from seatkeeper.domain.validation import FieldError

if TYPE_CHECKING:
    from seatkeeper.components.seats.models import SeatValidationOutput


class SeatkeeperError(Exception):
    """Base error."""

    pass


class InvalidInputError(SeatkeeperError):
    """Request rejected before any store access."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors) or "Invalid input")


class ClubNotFoundError(SeatkeeperError):
    def __init__(self, club_id: str) -> None:
        self.club_id = club_id
        super().__init__(f"Club not found: {club_id}")


class InvitationNotFoundError(SeatkeeperError):
    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Invitation not found: {code}")


class QuotaExceededError(SeatkeeperError):
    """One or more seat categories cannot take the requested seats."""

    def __init__(self, failures: Sequence[SeatValidationOutput]) -> None:
        self.failures = list(failures)
        super().__init__(" ".join(f.reason or "" for f in self.failures).strip())

    @property
    def categories(self) -> list[str]:
        return [f.category for f in self.failures]


class CodeCollisionError(SeatkeeperError):
    """
    Every regenerated code collided with an existing invitation.

    persisted_codes lists invitations of the same batch already written
    outside a transaction.
    """

    def __init__(self, attempts: int, persisted_codes: Sequence[str] = ()) -> None:
        self.attempts = attempts
        self.persisted_codes = list(persisted_codes)
        super().__init__(f"Could not generate a unique invitation code after {attempts} attempts")


class InvitationNotRedeemableError(SeatkeeperError):
    def __init__(self, code: str, reason: str) -> None:
        self.code = code
        self.reason = reason
        super().__init__(f"Invitation {code} cannot be redeemed: {reason}")
