"""SQLite document store adapter.

Documents are JSON blobs in a single `documents` table keyed by
(collection, doc_id). Blocking sqlite3 calls run in worker threads so the
event loop keeps serving other requests.

BEGIN IMMEDIATE takes the write lock for the whole database file, whatever
the scope. Transactions in this process queue on one asyncio.Lock before
they reach a worker thread, so waiting writers never hold a thread while the
writer that owns the database needs one. BEGIN IMMEDIATE still serializes
writers from other processes on the same file.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from seatkeeper.ports.store import Document, DocumentExistsError, StoreUnavailableError

T = TypeVar("T")


def _get(conn: sqlite3.Connection, collection: str, doc_id: str) -> Document | None:
    row = conn.execute(
        "SELECT data FROM documents WHERE collection = ? AND doc_id = ?",
        (collection, doc_id),
    ).fetchone()
    return json.loads(row[0]) if row else None


def _insert(conn: sqlite3.Connection, collection: str, doc_id: str, data: Document) -> None:
    try:
        conn.execute(
            "INSERT INTO documents (collection, doc_id, data) VALUES (?, ?, ?)",
            (collection, doc_id, json.dumps(data)),
        )
    except sqlite3.IntegrityError as e:
        raise DocumentExistsError(collection, doc_id) from e


def _upsert(conn: sqlite3.Connection, collection: str, doc_id: str, data: Document) -> None:
    conn.execute(
        """
        INSERT INTO documents (collection, doc_id, data) VALUES (?, ?, ?)
        ON CONFLICT(collection, doc_id) DO UPDATE SET
            data=excluded.data,
            updated_at=CURRENT_TIMESTAMP
        """,
        (collection, doc_id, json.dumps(data)),
    )


def _where(conn: sqlite3.Connection, collection: str, field: str, value: Any) -> list[Document]:
    if isinstance(value, bool):
        value = int(value)
    rows = conn.execute(
        "SELECT data FROM documents WHERE collection = ? AND json_extract(data, ?) = ?",
        (collection, f"$.{field}", value),
    ).fetchall()
    return [json.loads(row[0]) for row in rows]


class SQLiteDocumentStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._write_lock = asyncio.Lock()

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly
        return sqlite3.connect(self.db_path, isolation_level=None, check_same_thread=False)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"SQLite store error: {e}") from e

    def _once(self, fn: Callable[..., T], *args: Any) -> T:
        conn = self._get_conn()
        try:
            return fn(conn, *args)
        finally:
            conn.close()

    # --- DocumentStorePort ---

    async def get(self, collection: str, doc_id: str) -> Document | None:
        return await self._run(self._once, _get, collection, doc_id)

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        await self._run(self._once, _insert, collection, doc_id, data)

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        await self._run(self._once, _upsert, collection, doc_id, data)

    async def where(self, collection: str, field: str, value: Any) -> list[Document]:
        return await self._run(self._once, _where, collection, field, value)

    @asynccontextmanager
    async def transaction(self, scope: str) -> AsyncIterator[_SQLiteTransaction]:
        # sqlite's write lock covers the whole file, not just the scope
        async with self._write_lock:
            conn = await self._run(self._begin)
            try:
                yield _SQLiteTransaction(self, conn)
            except BaseException:
                await asyncio.to_thread(_rollback_and_close, conn)
                raise
            await self._run(_commit_and_close, conn)

    def _begin(self) -> sqlite3.Connection:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error:
            conn.close()
            raise
        return conn


def _commit_and_close(conn: sqlite3.Connection) -> None:
    try:
        conn.execute("COMMIT")
    except sqlite3.Error:
        conn.execute("ROLLBACK")
        raise
    finally:
        conn.close()


def _rollback_and_close(conn: sqlite3.Connection) -> None:
    try:
        conn.execute("ROLLBACK")
    finally:
        conn.close()


class _SQLiteTransaction:
    """Operations bound to one open BEGIN IMMEDIATE connection."""

    def __init__(self, store: SQLiteDocumentStore, conn: sqlite3.Connection) -> None:
        self._store = store
        self._conn = conn

    async def get(self, collection: str, doc_id: str) -> Document | None:
        return await self._store._run(_get, self._conn, collection, doc_id)

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        await self._store._run(_insert, self._conn, collection, doc_id, data)

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        await self._store._run(_upsert, self._conn, collection, doc_id, data)

    async def where(self, collection: str, field: str, value: Any) -> list[Document]:
        return await self._store._run(_where, self._conn, collection, field, value)
