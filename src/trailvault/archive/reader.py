# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Read-only access to stored weekly archives."""

from __future__ import annotations

import logging

from trailvault.archive.codec import decode_archive
from trailvault.models.archive import Summary, WeekArchive, WeekKey
from trailvault.storage.base import ArchiveStore

logger = logging.getLogger("trailvault.archive.reader")


class ArchiveReader:
    """Query surface over an :class:`ArchiveStore`: list, fetch, summarize."""

    def __init__(self, store: ArchiveStore) -> None:
        self._store = store

    async def list_weeks(self) -> list[str]:
        """Return the labels of all archived weeks, oldest first."""
        weeks = [
            WeekKey.parse(info.key)
            for info in await self._store.list_objects()
            if _is_week_label(info.key)
        ]
        return [w.label for w in sorted(weeks)]

    async def fetch_week(self, label: str) -> WeekArchive | None:
        """Return the archive stored under *label*, or ``None``."""
        stored = await self._store.get(WeekKey.parse(label).label)
        if stored is None:
            return None
        return decode_archive(stored)

    async def fetch_summary(self, label: str) -> Summary | None:
        archive = await self.fetch_week(label)
        return archive.summary if archive is not None else None

    async def most_recent(self) -> WeekArchive | None:
        """Return the most recently modified archive, or ``None`` if empty."""
        objects = [o for o in await self._store.list_objects() if _is_week_label(o.key)]
        if not objects:
            return None
        latest = max(objects, key=lambda o: (o.last_modified, o.key))
        return await self.fetch_week(latest.key)


def _is_week_label(key: str) -> bool:
    try:
        WeekKey.parse(key)
    except ValueError:
        logger.debug("Ignoring non-archive key %r", key)
        return False
    return True
