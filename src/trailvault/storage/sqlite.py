# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SQLite implementation of the :class:`ArchiveStore` interface.

Wraps an :mod:`aiosqlite` connection. Conditional writes are single
statements whose affected row count tells whether the expected version
still held.
"""

from __future__ import annotations

import contextlib
import uuid
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from trailvault.core.exceptions import StorageError, TransientStoreError
from trailvault.storage.base import ArchiveStore, ObjectInfo, StoredObject

SCHEMA = """
CREATE TABLE IF NOT EXISTS weekly_archives (
    key           TEXT PRIMARY KEY,
    body          TEXT NOT NULL,
    version       TEXT NOT NULL,
    last_modified TEXT NOT NULL
)
"""


class SQLiteArchiveStore(ArchiveStore):
    """Async SQLite archive store backed by an :class:`aiosqlite.Connection`."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    @classmethod
    async def open(cls, db_path: Path | str = "trailvault.db") -> SQLiteArchiveStore:
        """Connect, enable WAL mode, and create the archive table if needed."""
        try:
            conn = await aiosqlite.connect(str(db_path))
        except aiosqlite.Error as exc:
            msg = f"Failed to open archive database at {db_path}: {exc}"
            raise StorageError(msg) from exc

        try:
            conn.row_factory = aiosqlite.Row
            # WAL mode
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA busy_timeout=5000")
            await conn.execute(SCHEMA)
            await conn.commit()
        except aiosqlite.Error as exc:
            await conn.close()
            msg = f"Failed to initialise archive database at {db_path}: {exc}"
            raise StorageError(msg) from exc
        return cls(conn)

    # ------------------------------------------------------------------
    # ArchiveStore interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> StoredObject | None:
        try:
            cursor = await self._conn.execute(
                "SELECT key, body, version, last_modified FROM weekly_archives WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except aiosqlite.OperationalError as exc:
            raise TransientStoreError(f"Read of {key} failed: {exc}") from exc
        except aiosqlite.Error as exc:
            raise StorageError(f"Read of {key} failed: {exc}") from exc
        if row is None:
            return None
        return StoredObject(
            key=row["key"],
            body=row["body"],
            version=row["version"],
            last_modified=datetime.fromisoformat(row["last_modified"]),
        )

    async def put_if_version(
        self,
        key: str,
        body: str,
        expected_version: str | None,
    ) -> bool:
        new_version = uuid.uuid4().hex
        now = datetime.now(UTC).isoformat()
        try:
            if expected_version is None:
                cursor = await self._conn.execute(
                    """
                    INSERT INTO weekly_archives (key, body, version, last_modified)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(key) DO NOTHING
                    """,
                    (key, body, new_version, now),
                )
            else:
                cursor = await self._conn.execute(
                    """
                    UPDATE weekly_archives
                    SET body = ?, version = ?, last_modified = ?
                    WHERE key = ? AND version = ?
                    """,
                    (body, new_version, now, key, expected_version),
                )
            await self._conn.commit()
        except aiosqlite.OperationalError as exc:
            await self._rollback()
            raise TransientStoreError(f"Write of {key} failed: {exc}") from exc
        except aiosqlite.Error as exc:
            await self._rollback()
            raise StorageError(f"Write of {key} failed: {exc}") from exc
        return cursor.rowcount == 1

    async def list_objects(self) -> list[ObjectInfo]:
        try:
            cursor = await self._conn.execute(
                """
                SELECT key, version, last_modified, LENGTH(CAST(body AS BLOB)) AS size
                FROM weekly_archives ORDER BY key
                """
            )
            rows = await cursor.fetchall()
        except aiosqlite.OperationalError as exc:
            raise TransientStoreError(f"Listing archives failed: {exc}") from exc
        except aiosqlite.Error as exc:
            raise StorageError(f"Listing archives failed: {exc}") from exc
        return [
            ObjectInfo(
                key=row["key"],
                version=row["version"],
                last_modified=datetime.fromisoformat(row["last_modified"]),
                size=int(row["size"]),
            )
            for row in rows
        ]

    async def close(self) -> None:
        await self._conn.close()

    @property
    def backend_name(self) -> str:
        return "sqlite"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _rollback(self) -> None:
        """End a failed write's transaction so later reads see committed rows only."""
        with contextlib.suppress(aiosqlite.Error):
            await self._conn.rollback()
