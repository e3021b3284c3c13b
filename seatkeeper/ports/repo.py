from typing import Protocol

from seatkeeper.domain.entities import Club, Invitation, Member


class ClubRepoPort(Protocol):
    async def get(self, club_id: str) -> Club | None:
        ...

    async def create(self, club: Club) -> Club:
        ...

    async def save(self, club: Club) -> Club:
        ...


class MemberRepoPort(Protocol):
    async def list_by_club(self, club_id: str) -> list[Member]:
        ...

    async def save(self, member: Member) -> Member:
        ...


class InvitationRepoPort(Protocol):
    async def get(self, code: str) -> Invitation | None:
        ...

    async def create(self, invitation: Invitation) -> Invitation:
        """Insert if absent; raises DocumentExistsError when the code is taken."""
        ...

    async def save(self, invitation: Invitation) -> Invitation:
        ...

    async def list_by_club(self, club_id: str) -> list[Invitation]:
        ...
