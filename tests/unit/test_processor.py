# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for batch processing: filtering, partitioning, and per-week outcomes."""

from __future__ import annotations

import asyncio
import gzip
import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from trailvault.archive.merge import ArchiveMergeEngine, MergeResult
from trailvault.archive.processor import BatchProcessor, BatchReport
from trailvault.archive.reader import ArchiveReader
from trailvault.core.config import Settings
from trailvault.core.constants import FailureKind
from trailvault.core.exceptions import (
    ConfigurationError,
    MergeConflict,
    ParseError,
    StorageError,
    StoreUnavailable,
)
from trailvault.ingestion.week import week_key
from trailvault.models.archive import WeekKey
from trailvault.storage.memory import MemoryArchiveStore


@pytest.fixture
def processor(memory_store, settings, fixed_clock) -> BatchProcessor:
    return BatchProcessor(memory_store, settings, clock=fixed_clock)


async def _archive(store, label: str):
    return await ArchiveReader(store).fetch_week(label)


class TestScenario:
    async def test_duplicate_redelivered_in_later_batch(
        self, processor, memory_store, record_factory
    ) -> None:
        first = await processor.process(
            [
                record_factory("r1", event_time="2024-01-15T10:00:00Z"),
                record_factory("r2", event_time="2024-01-18T16:30:00Z"),
            ]
        )
        second = await processor.process([record_factory("r1", event_time="2024-01-15T10:00:00Z")])

        assert first.merged_count == 2
        assert first.weeks_merged == ["2024-W03"]
        assert second.merged_count == 0
        assert second.duplicate_count == 1

        archive = await _archive(memory_store, "2024-W03")
        assert len(archive.events) == 2
        assert archive.summary.total_events == 2
        assert archive.summary.top_operations == {"READ": 2}

    async def test_same_batch_twice_yields_same_archive(
        self, processor, memory_store, record_factory
    ) -> None:
        batch = [
            record_factory("r1"),
            record_factory("r2", event_name="PutObject"),
            record_factory("r3", event_name="DeleteObject", event_time="2024-01-22T00:00:00Z"),
        ]
        await processor.process(batch)
        keys = [o.key for o in await memory_store.list_objects()]
        once = {k: (await memory_store.get(k)).body for k in keys}

        report = await processor.process(batch)

        assert keys == ["2024-W03", "2024-W04"]
        assert report.merged_count == 0
        assert report.duplicate_count == 3
        assert {k: (await memory_store.get(k)).body for k in keys} == once


class TestCounts:
    async def test_report_counts(self, processor, record_factory) -> None:
        report = await processor.process(
            [
                record_factory("r1"),
                record_factory("r2", bucket="invoices"),
                record_factory("r3", eventSource="kms.amazonaws.com"),
                "not a record",
                {"eventName": "GetObject"},
                record_factory("r4", event_name="PutObject"),
            ]
        )
        assert report.total_records == 6
        assert report.malformed_count == 2
        assert report.filtered_count == 2
        assert report.relevant_count == 2
        assert report.merged_count == 2
        assert report.complete is True

    async def test_to_dict(self, processor, record_factory) -> None:
        data = (await processor.process([record_factory("r1")])).to_dict()
        assert data == {
            "total_records": 1,
            "malformed_count": 0,
            "filtered_count": 0,
            "relevant_count": 1,
            "merged_count": 1,
            "duplicate_count": 0,
            "weeks_merged": ["2024-W03"],
            "failures": [],
            "not_attempted": [],
        }

    async def test_empty_batch(self, processor) -> None:
        report = await processor.process([])
        assert report == BatchReport()


class TestPartitioning:
    async def test_events_grouped_by_iso_week(self, processor, memory_store, record_factory) -> None:
        report = await processor.process(
            [
                record_factory("r1", event_time="2024-12-30T09:00:00Z"),
                record_factory("r2", event_time="2024-12-29T23:59:59Z"),
                record_factory("r3", event_time="2025-01-02T12:00:00Z"),
            ]
        )
        assert report.weeks_merged == ["2024-W52", "2025-W01"]
        assert len((await _archive(memory_store, "2025-W01")).events) == 2
        assert len((await _archive(memory_store, "2024-W52")).events) == 1

    async def test_unparsable_timestamp_filed_under_processing_week(
        self, processor, memory_store, record_factory
    ) -> None:
        report = await processor.process([record_factory("r1", event_time="not-a-time")])
        assert report.weeks_merged == ["2024-W03"]

        again = await processor.process([record_factory("r1", event_time="not-a-time")])
        assert again.merged_count == 0
        assert again.duplicate_count == 1
        assert len((await _archive(memory_store, "2024-W03")).events) == 1

    async def test_missing_timestamp_rejected_when_configured(
        self, memory_store, settings, fixed_clock, record_factory
    ) -> None:
        cfg = settings.model_copy(update={"timestamp_fallback": "reject"})
        processor = BatchProcessor(memory_store, cfg, clock=fixed_clock)

        report = await processor.process([record_factory("r1", event_time=None), record_factory("r2")])

        assert report.malformed_count == 1
        assert report.merged_count == 1
        assert set((await _archive(memory_store, "2024-W03")).events) == {"r2"}

    async def test_out_of_range_time_does_not_abort_batch(
        self, processor, memory_store, record_factory
    ) -> None:
        report = await processor.process(
            [
                record_factory("r1", event_time="0001-01-01T00:30:00+01:00"),
                record_factory("r2"),
            ]
        )

        assert report.relevant_count == 2
        assert report.merged_count == 2
        assert report.weeks_merged == ["2024-W03"]
        assert set((await _archive(memory_store, "2024-W03")).events) == {"r1", "r2"}

    async def test_out_of_range_time_rejected_when_configured(
        self, memory_store, settings, fixed_clock, record_factory
    ) -> None:
        cfg = settings.model_copy(update={"timestamp_fallback": "reject"})
        processor = BatchProcessor(memory_store, cfg, clock=fixed_clock)

        report = await processor.process(
            [
                record_factory("r1", event_time="9999-12-31T23:00:00-05:00"),
                record_factory("r2"),
            ]
        )

        assert report.malformed_count == 1
        assert report.merged_count == 1

    async def test_early_year_week_reloads_on_next_merge(self, processor, record_factory) -> None:
        label = week_key(datetime(999, 6, 1, tzinfo=UTC)).label
        batch = [record_factory("r1", event_time="0999-06-01T00:00:00Z")]

        first = await processor.process(batch)
        second = await processor.process(batch)

        assert label.startswith("0999-W")
        assert first.weeks_merged == [label]
        assert second.failures == []
        assert second.weeks_merged == [label]
        assert second.duplicate_count == 1


class TestFailures:
    async def test_failed_week_does_not_block_others(self, memory_store, settings, record_factory) -> None:
        engine = ArchiveMergeEngine.from_settings(memory_store, settings)
        real_merge = engine.merge

        async def merge(week: WeekKey, events):
            if week == WeekKey(2024, 3):
                raise MergeConflict(week.label, 6)
            return await real_merge(week, events)

        engine.merge = merge  # type: ignore[method-assign]
        processor = BatchProcessor(memory_store, settings, engine=engine)

        report = await processor.process(
            [
                record_factory("r1", event_time="2024-01-08T10:00:00Z"),
                record_factory("r2", event_time="2024-01-15T10:00:00Z"),
                record_factory("r3", event_time="2024-01-22T10:00:00Z"),
            ]
        )

        assert report.weeks_merged == ["2024-W02", "2024-W04"]
        assert [(f.week, f.kind) for f in report.failures] == [
            ("2024-W03", FailureKind.MERGE_CONFLICT)
        ]
        assert report.complete is False
        assert report.to_dict()["failures"][0]["kind"] == "merge_conflict"

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (StoreUnavailable("2024-W03", 3), FailureKind.STORE_UNAVAILABLE),
            (StorageError("Archive 2024-W03 is unreadable"), FailureKind.STORAGE_ERROR),
        ],
    )
    async def test_failure_kinds(self, memory_store, settings, record_factory, error, kind) -> None:
        engine = AsyncMock(spec=ArchiveMergeEngine)
        engine.merge.side_effect = error
        processor = BatchProcessor(memory_store, settings, engine=engine)

        report = await processor.process([record_factory("r1")])

        assert report.failures[0].kind == kind
        assert report.weeks_merged == []

    async def test_deadline_marks_remaining_weeks_not_attempted(
        self, memory_store, settings, record_factory
    ) -> None:
        engine = AsyncMock(spec=ArchiveMergeEngine)

        async def slow_merge(week, events):
            await asyncio.sleep(10)

        engine.merge.side_effect = slow_merge
        cfg = settings.model_copy(update={"batch_deadline_seconds": 0.05})
        processor = BatchProcessor(memory_store, cfg, engine=engine)

        report = await processor.process(
            [
                record_factory("r1", event_time="2024-01-08T10:00:00Z"),
                record_factory("r2", event_time="2024-01-15T10:00:00Z"),
                record_factory("r3", event_time="2024-01-22T10:00:00Z"),
            ]
        )

        assert [(f.week, f.kind) for f in report.failures] == [
            ("2024-W02", FailureKind.DEADLINE_EXCEEDED)
        ]
        assert report.not_attempted == ["2024-W03", "2024-W04"]
        assert engine.merge.await_count == 1

    async def test_weeks_merged_before_deadline_stay_committed(
        self, memory_store, settings, record_factory
    ) -> None:
        engine = ArchiveMergeEngine.from_settings(memory_store, settings)
        real_merge = engine.merge

        async def merge(week: WeekKey, events) -> MergeResult:
            if week != WeekKey(2024, 2):
                await asyncio.sleep(10)
            return await real_merge(week, events)

        engine.merge = merge  # type: ignore[method-assign]
        cfg = settings.model_copy(update={"batch_deadline_seconds": 0.05})
        processor = BatchProcessor(memory_store, cfg, engine=engine)

        report = await processor.process(
            [
                record_factory("r1", event_time="2024-01-08T10:00:00Z"),
                record_factory("r2", event_time="2024-01-15T10:00:00Z"),
            ]
        )

        assert report.weeks_merged == ["2024-W02"]
        assert await memory_store.get("2024-W02") is not None
        assert await memory_store.get("2024-W03") is None


class TestLogFile:
    async def test_gzipped_log_file(self, processor, memory_store, record_factory) -> None:
        payload = gzip.compress(
            json.dumps({"Records": [record_factory("r1"), record_factory("r2")]}).encode()
        )
        report = await processor.process_log_file(payload)
        assert report.merged_count == 2

    async def test_undecodable_log_file(self, processor) -> None:
        with pytest.raises(ParseError):
            await processor.process_log_file(b"\x00\x01garbage")


class TestConstruction:
    def test_missing_resource_is_fatal(self, memory_store) -> None:
        cfg = Settings(monitored_resource="", _env_file=None)
        with pytest.raises(ConfigurationError, match="monitored resource"):
            BatchProcessor(memory_store, cfg)

    def test_bad_week_numbering_is_fatal(self, memory_store, settings) -> None:
        cfg = settings.model_copy(update={"week_numbering": "us-sunday"})
        with pytest.raises(ConfigurationError, match="week numbering"):
            BatchProcessor(MemoryArchiveStore(), cfg)

    async def test_engine_takes_precedence_over_store(self, settings, record_factory) -> None:
        engine_store = MemoryArchiveStore()
        other_store = MemoryArchiveStore()
        engine = ArchiveMergeEngine.from_settings(engine_store, settings)
        processor = BatchProcessor(other_store, settings, engine=engine)

        await processor.process([record_factory("r1")])

        assert await engine_store.get("2024-W03") is not None
        assert await other_store.list_objects() == []
