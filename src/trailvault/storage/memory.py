# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory archive store.

Process-local and non-durable; used for tests and dry runs. Each successful
write issues a fresh random version token.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from trailvault.storage.base import ArchiveStore, ObjectInfo, StoredObject


class MemoryArchiveStore(ArchiveStore):
    """Dict-backed archive store with compare-and-set writes."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    # ------------------------------------------------------------------
    # ArchiveStore interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> StoredObject | None:
        return self._objects.get(key)

    async def put_if_version(
        self,
        key: str,
        body: str,
        expected_version: str | None,
    ) -> bool:
        # No await between the check and the write, so this is atomic
        # with respect to other coroutines on the loop.
        current = self._objects.get(key)
        current_version = current.version if current is not None else None
        if current_version != expected_version:
            return False
        self._objects[key] = StoredObject(
            key=key,
            body=body,
            version=uuid.uuid4().hex,
            last_modified=datetime.now(UTC),
        )
        return True

    async def list_objects(self) -> list[ObjectInfo]:
        return [
            ObjectInfo(
                key=obj.key,
                version=obj.version,
                last_modified=obj.last_modified,
                size=len(obj.body.encode("utf-8")),
            )
            for _, obj in sorted(self._objects.items())
        ]

    async def close(self) -> None:
        self._objects.clear()

    @property
    def backend_name(self) -> str:
        return "memory"
