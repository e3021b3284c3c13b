"""In-memory document store adapter.

Implements TransactionalStorePort for development and tests.
Suitable for single-process deployments only; transactions serialize on an
asyncio.Lock per scope.
"""

from __future__ import annotations

import asyncio
import copy
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from seatkeeper.ports.store import Document, DocumentExistsError, StoreUnavailableError


class InMemoryDocumentStore:
    """Dict-backed document store. Every operation yields to the event loop."""

    def __init__(self, latency: float = 0.0) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        # Idle scopes drop out once no transaction holds their lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._latency = latency
        self._fail_after: int | None = None
        self.write_count = 0

    async def _io(self) -> None:
        # Stand-in for the network round trip of a hosted store
        await asyncio.sleep(self._latency)

    def _count_write(self) -> None:
        if self._fail_after is not None and self.write_count >= self._fail_after:
            raise StoreUnavailableError("Document store unavailable")
        self.write_count += 1

    def _read(self, collection: str, doc_id: str) -> Document | None:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def _write(self, collection: str, doc_id: str, data: Document) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    # --- DocumentStorePort ---

    async def get(self, collection: str, doc_id: str) -> Document | None:
        await self._io()
        return self._read(collection, doc_id)

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        await self._io()
        if doc_id in self._collections.get(collection, {}):
            raise DocumentExistsError(collection, doc_id)
        self._count_write()
        self._write(collection, doc_id, data)

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        await self._io()
        self._count_write()
        self._write(collection, doc_id, data)

    async def where(self, collection: str, field: str, value: Any) -> list[Document]:
        await self._io()
        return [
            copy.deepcopy(doc)
            for doc in self._collections.get(collection, {}).values()
            if doc.get(field) == value
        ]

    @asynccontextmanager
    async def transaction(self, scope: str) -> AsyncIterator[_MemoryTransaction]:
        lock = self._locks.get(scope)
        if lock is None:
            lock = self._locks[scope] = asyncio.Lock()
        async with lock:
            tx = _MemoryTransaction(self)
            yield tx
            tx.commit()

    # --- Test Helper Methods ---

    def simulate_outage(self, after_writes: int = 0) -> None:
        """Fail every write after the next `after_writes` succeed."""
        self._fail_after = self.write_count + after_writes

    def restore(self) -> None:
        self._fail_after = None

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))

    def clear(self) -> None:
        self._collections.clear()
        self.write_count = 0


class _MemoryTransaction:
    """Unit of work: reads see staged writes, writes apply on commit."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self._staged: dict[tuple[str, str], Document] = {}

    async def get(self, collection: str, doc_id: str) -> Document | None:
        await self._store._io()
        staged = self._staged.get((collection, doc_id))
        if staged is not None:
            return copy.deepcopy(staged)
        return self._store._read(collection, doc_id)

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        await self._store._io()
        exists = (collection, doc_id) in self._staged
        if exists or doc_id in self._store._collections.get(collection, {}):
            raise DocumentExistsError(collection, doc_id)
        self._store._count_write()
        self._staged[(collection, doc_id)] = copy.deepcopy(data)

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        await self._store._io()
        self._store._count_write()
        self._staged[(collection, doc_id)] = copy.deepcopy(data)

    async def where(self, collection: str, field: str, value: Any) -> list[Document]:
        await self._store._io()
        merged = dict(self._store._collections.get(collection, {}))
        for (staged_collection, doc_id), doc in self._staged.items():
            if staged_collection == collection:
                merged[doc_id] = doc
        return [copy.deepcopy(doc) for doc in merged.values() if doc.get(field) == value]

    def commit(self) -> None:
        for (collection, doc_id), doc in self._staged.items():
            self._store._write(collection, doc_id, doc)
        self._staged.clear()
