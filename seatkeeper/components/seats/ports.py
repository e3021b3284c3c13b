"""
Seats component - Port interfaces.

Seat accounting only reads; these are the read halves of the repositories.
"""

from __future__ import annotations

from typing import Protocol

from seatkeeper.domain.entities import Club, Invitation, Member


class ClubReaderPort(Protocol):
    async def get(self, club_id: str) -> Club | None:
        ...


class MemberReaderPort(Protocol):
    async def list_by_club(self, club_id: str) -> list[Member]:
        ...


class InvitationReaderPort(Protocol):
    async def list_by_club(self, club_id: str) -> list[Invitation]:
        ...
