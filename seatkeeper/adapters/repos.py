"""Typed repositories over a document store.

Collection names match the hosted database the portal writes to.
"""

from __future__ import annotations

from dataclasses import dataclass

from seatkeeper.domain.entities import Club, Invitation, Member
from seatkeeper.ports.store import DocumentStorePort

CLUBS = "sports_clubs"
MEMBERS = "users"
INVITATIONS = "referral_codes"


class DocumentClubRepo:
    def __init__(self, store: DocumentStorePort):
        self.store = store

    async def get(self, club_id: str) -> Club | None:
        data = await self.store.get(CLUBS, club_id)
        return Club.from_document(data) if data else None

    async def create(self, club: Club) -> Club:
        await self.store.create(CLUBS, club.id, club.to_document())
        return club

    async def save(self, club: Club) -> Club:
        await self.store.set(CLUBS, club.id, club.to_document())
        return club


class DocumentMemberRepo:
    def __init__(self, store: DocumentStorePort):
        self.store = store

    async def list_by_club(self, club_id: str) -> list[Member]:
        docs = await self.store.where(MEMBERS, "clubId", club_id)
        return [Member.from_document(d) for d in docs]

    async def save(self, member: Member) -> Member:
        await self.store.set(MEMBERS, member.id, member.to_document())
        return member


class DocumentInvitationRepo:
    def __init__(self, store: DocumentStorePort):
        self.store = store

    async def get(self, code: str) -> Invitation | None:
        data = await self.store.get(INVITATIONS, code)
        return Invitation.from_document(data) if data else None

    async def create(self, invitation: Invitation) -> Invitation:
        await self.store.create(INVITATIONS, invitation.code, invitation.to_document())
        return invitation

    async def save(self, invitation: Invitation) -> Invitation:
        await self.store.set(INVITATIONS, invitation.code, invitation.to_document())
        return invitation

    async def list_by_club(self, club_id: str) -> list[Invitation]:
        docs = await self.store.where(INVITATIONS, "clubId", club_id)
        return [Invitation.from_document(d) for d in docs]


@dataclass(frozen=True)
class Repos:
    """The three collections, bound to one store or one open transaction."""

    clubs: DocumentClubRepo
    members: DocumentMemberRepo
    invitations: DocumentInvitationRepo

    @classmethod
    def bind(cls, store: DocumentStorePort) -> Repos:
        return cls(
            clubs=DocumentClubRepo(store),
            members=DocumentMemberRepo(store),
            invitations=DocumentInvitationRepo(store),
        )
