# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the read-only archive reader."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from trailvault.archive.merge import ArchiveMergeEngine
from trailvault.archive.reader import ArchiveReader
from trailvault.models.archive import WeekKey
from trailvault.models.event import CanonicalEvent
from trailvault.storage.base import StoredObject


def _event(request_id: str) -> CanonicalEvent:
    return CanonicalEvent(request_id=request_id, timestamp=datetime(2024, 1, 15, tzinfo=UTC))


@pytest.fixture
async def populated(memory_store):
    engine = ArchiveMergeEngine(memory_store)
    await engine.merge(WeekKey(2024, 5), [_event("r1")])
    await engine.merge(WeekKey(2023, 52), [_event("r2"), _event("r3")])
    return memory_store


class TestArchiveReader:
    async def test_list_weeks_chronological(self, populated) -> None:
        assert await ArchiveReader(populated).list_weeks() == ["2023-W52", "2024-W05"]

    async def test_list_ignores_foreign_keys(self, populated) -> None:
        await populated.put_if_version("README", "hello", None)
        assert await ArchiveReader(populated).list_weeks() == ["2023-W52", "2024-W05"]

    async def test_fetch_week(self, populated) -> None:
        archive = await ArchiveReader(populated).fetch_week("2023-W52")
        assert archive is not None
        assert set(archive.events) == {"r2", "r3"}

    async def test_fetch_missing_week(self, populated) -> None:
        assert await ArchiveReader(populated).fetch_week("2022-W01") is None

    async def test_fetch_rejects_malformed_label(self, populated) -> None:
        with pytest.raises(ValueError):
            await ArchiveReader(populated).fetch_week("2022-1")

    async def test_fetch_summary(self, populated) -> None:
        summary = await ArchiveReader(populated).fetch_summary("2023-W52")
        assert summary is not None
        assert summary.total_events == 2
        assert await ArchiveReader(populated).fetch_summary("2022-W01") is None

    async def test_most_recent_by_modification_time(self, populated) -> None:
        # Backdate the newer week so the older week is the latest write
        stored = populated._objects["2023-W52"]
        populated._objects["2023-W52"] = StoredObject(
            key=stored.key,
            body=stored.body,
            version=stored.version,
            last_modified=datetime.now(UTC) + timedelta(hours=1),
        )
        archive = await ArchiveReader(populated).most_recent()
        assert archive is not None
        assert archive.week == WeekKey(2023, 52)

    async def test_most_recent_empty(self, memory_store) -> None:
        assert await ArchiveReader(memory_store).most_recent() is None
