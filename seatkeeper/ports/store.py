"""
Document Store Interface.

Protocol-based interface for the hosted key-document database that holds
club, member and invitation records.

Key requirements:
- Every read and write is an asynchronous I/O boundary
- create() is create-if-absent: it never overwrites an existing document
- transaction(scope) serializes work on one scope (a club) and applies its
  writes all-or-nothing

Implementation strategies:
1. InMemoryDocumentStore: single-process dict store (dev/test)
2. SQLiteDocumentStore: JSON documents in a SQLite table
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

Document = dict[str, Any]


class DocumentStorePort(Protocol):
    """Read/write access to collections of JSON-compatible documents."""

    async def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch a document by id, or None if it does not exist."""
        ...

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        """
        Insert a new document.

        Raises:
            DocumentExistsError: a document with this id already exists
        """
        ...

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        """Insert or replace a document."""
        ...

    async def where(self, collection: str, field: str, value: Any) -> list[Document]:
        """List documents whose top-level field equals value."""
        ...


class TransactionalStorePort(DocumentStorePort, Protocol):
    """Document store that can serialize and atomically commit a unit of work."""

    def transaction(self, scope: str) -> AbstractAsyncContextManager[DocumentStorePort]:
        """
        Open a unit of work on the given scope.

        Concurrent transactions on the same scope run one after another.
        Writes made through the yielded store become visible to others only
        when the block exits normally; an exception discards them.
        """
        ...


class StoreError(Exception):
    """Base class for store errors."""


class DocumentExistsError(StoreError):
    """Raised when create() targets an existing document id."""

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document already exists: {collection}/{doc_id}")


class StoreUnavailableError(StoreError):
    """
    The store could not complete a read or write.

    persisted_codes lists invitation codes known to be durably written
    before the failure, so callers can tell what a failed batch left behind.
    """

    def __init__(self, message: str, persisted_codes: Sequence[str] = ()) -> None:
        self.persisted_codes = list(persisted_codes)
        super().__init__(message)

    @property
    def persisted_count(self) -> int:
        return len(self.persisted_codes)
