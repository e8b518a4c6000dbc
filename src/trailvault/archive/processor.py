# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Batch processor: raw audit records in, per-week merge outcomes out.

The ``BatchProcessor`` validates, filters, and normalizes a delivered batch,
groups the resulting events by week, and merges each week independently. A
failing week never blocks or rolls back the others, and the report always
lists which weeks failed or were never attempted so the caller can safely
redeliver the batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from trailvault.archive.merge import ArchiveMergeEngine
from trailvault.core.config import Settings, get_settings, validate_settings
from trailvault.core.constants import FailureKind, TimestampFallback
from trailvault.core.exceptions import (
    MalformedRecord,
    MergeConflict,
    StorageError,
    StoreUnavailable,
)
from trailvault.ingestion.cloudtrail import decode_log_file
from trailvault.ingestion.normalizer import normalize
from trailvault.ingestion.relevance import is_relevant
from trailvault.ingestion.week import Clock, utc_now, week_key
from trailvault.models.archive import WeekKey
from trailvault.models.event import CanonicalEvent
from trailvault.models.record import RawAuditRecord
from trailvault.storage.base import ArchiveStore

logger = logging.getLogger("trailvault.archive.processor")


@dataclass(frozen=True, slots=True)
class WeekFailure:
    """A week whose merge did not complete."""

    week: str
    kind: FailureKind
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"week": self.week, "kind": self.kind.value, "message": self.message}


@dataclass(slots=True)
class BatchReport:
    """Summary of one batch."""

    total_records: int = 0
    malformed_count: int = 0
    filtered_count: int = 0
    relevant_count: int = 0
    merged_count: int = 0
    duplicate_count: int = 0
    weeks_merged: list[str] = field(default_factory=list)
    failures: list[WeekFailure] = field(default_factory=list)
    not_attempted: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every week in the batch was merged."""
        return not self.failures and not self.not_attempted

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict for JSON output."""
        return {
            "total_records": self.total_records,
            "malformed_count": self.malformed_count,
            "filtered_count": self.filtered_count,
            "relevant_count": self.relevant_count,
            "merged_count": self.merged_count,
            "duplicate_count": self.duplicate_count,
            "weeks_merged": self.weeks_merged,
            "failures": [f.to_dict() for f in self.failures],
            "not_attempted": self.not_attempted,
        }


class BatchProcessor:
    """Filter -> normalize -> partition -> merge for one delivered batch.

    Parameters
    ----------
    store:
        Archive store receiving the weekly archives. Unused when *engine*
        is given, since the engine already owns its store.
    settings:
        Validated once here; a :class:`ConfigurationError` surfaces at
        construction rather than per batch.
    engine:
        Merge engine override. Takes precedence over *store*; built from
        *store* and *settings* when omitted.
    clock:
        Source of the processing instant used for timestamp-less events.
    """

    def __init__(
        self,
        store: ArchiveStore,
        settings: Settings | None = None,
        *,
        engine: ArchiveMergeEngine | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = validate_settings(settings or get_settings())
        self._resource = self._settings.monitored_resource
        self._fallback = TimestampFallback(self._settings.timestamp_fallback)
        self._deadline = self._settings.batch_deadline_seconds or None
        self._clock = clock
        if engine is None:
            engine = ArchiveMergeEngine.from_settings(store, self._settings, clock=clock)
        self._engine = engine

    async def process_log_file(self, data: bytes) -> BatchReport:
        """Decode a CloudTrail log file and process its records.

        Raises:
            ParseError: If the file itself cannot be decoded.
        """
        return await self.process(decode_log_file(data))

    async def process(self, raw_records: Iterable[object]) -> BatchReport:
        """Process one batch of raw records and report per-week outcomes."""
        started = time.monotonic()
        report = BatchReport()
        groups = self._partition(raw_records, report)

        weeks = sorted(groups)
        for index, week in enumerate(weeks):
            remaining = self._remaining(started)
            if remaining is not None and remaining <= 0:
                report.not_attempted.extend(w.label for w in weeks[index:])
                logger.warning(
                    "Batch deadline reached, %d weeks not attempted",
                    len(weeks) - index,
                )
                break

            events = groups[week]
            try:
                async with asyncio.timeout(remaining):
                    result = await self._engine.merge(week, events)
            except TimeoutError:
                self._fail(report, week, FailureKind.DEADLINE_EXCEEDED, "Batch deadline exceeded mid-merge")
                report.not_attempted.extend(w.label for w in weeks[index + 1 :])
                break
            except MergeConflict as exc:
                self._fail(report, week, FailureKind.MERGE_CONFLICT, str(exc))
                continue
            except StoreUnavailable as exc:
                self._fail(report, week, FailureKind.STORE_UNAVAILABLE, str(exc))
                continue
            except StorageError as exc:
                self._fail(report, week, FailureKind.STORAGE_ERROR, str(exc))
                continue

            report.weeks_merged.append(week.label)
            report.merged_count += result.applied_count
            report.duplicate_count += len(events) - result.applied_count

        logger.info(
            "Batch done: %d records, %d malformed, %d filtered, %d merged, %d duplicates, %d failed weeks",
            report.total_records,
            report.malformed_count,
            report.filtered_count,
            report.merged_count,
            report.duplicate_count,
            len(report.failures),
            extra={"resource": self._resource},
        )
        return report

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _partition(
        self,
        raw_records: Iterable[object],
        report: BatchReport,
    ) -> dict[WeekKey, list[CanonicalEvent]]:
        """Validate, filter, and normalize records, grouping them by week."""
        now = self._clock()
        groups: dict[WeekKey, list[CanonicalEvent]] = defaultdict(list)

        for index, raw in enumerate(raw_records):
            report.total_records += 1
            try:
                record = RawAuditRecord.from_raw(raw)
            except MalformedRecord as exc:
                report.malformed_count += 1
                logger.warning("Skipping record %d: %s", index, exc)
                continue

            if not is_relevant(record, self._resource):
                report.filtered_count += 1
                continue

            event = normalize(record)
            if event.timestamp is None and self._fallback == TimestampFallback.REJECT:
                report.malformed_count += 1
                logger.warning(
                    "Skipping record %d: unparsable event time %r",
                    index,
                    record.event_time,
                    extra={"request_id": record.request_id},
                )
                continue

            report.relevant_count += 1
            groups[week_key(event.timestamp, clock=lambda: now)].append(event)

        return groups

    def _remaining(self, started: float) -> float | None:
        if self._deadline is None:
            return None
        return self._deadline - (time.monotonic() - started)

    @staticmethod
    def _fail(report: BatchReport, week: WeekKey, kind: FailureKind, message: str) -> None:
        logger.error("Merge of %s failed (%s): %s", week.label, kind, message, extra={"week": week.label})
        report.failures.append(WeekFailure(week=week.label, kind=kind, message=message))
