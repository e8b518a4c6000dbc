# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Archive merge engine: deduplicating, version-conditioned weekly merges.

A merge reads the current week archive, drops events whose ``request_id`` is
already archived, recomputes the summary over the union, and writes back only
if the archive version is unchanged. A lost race restarts from a fresh read,
so concurrent writers never overwrite each other and redelivered events are
never counted twice.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from trailvault.analytics.aggregator import aggregate
from trailvault.archive.codec import decode_archive, encode_archive
from trailvault.core.config import Settings
from trailvault.core.constants import DEFAULT_TOP_N
from trailvault.core.exceptions import MergeConflict, StoreUnavailable, TransientStoreError
from trailvault.ingestion.week import Clock, utc_now
from trailvault.models.archive import Summary, WeekArchive, WeekKey
from trailvault.models.event import CanonicalEvent
from trailvault.storage.base import ArchiveStore

logger = logging.getLogger("trailvault.archive.merge")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of merging a set of events into one week archive."""

    week: WeekKey
    applied_count: int
    total_count: int
    summary: Summary
    attempts: int = 1

    @property
    def written(self) -> bool:
        return self.applied_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week.label,
            "applied_count": self.applied_count,
            "total_count": self.total_count,
            "attempts": self.attempts,
            "summary": self.summary.model_dump(),
        }


class ArchiveMergeEngine:
    """Merge canonical events into per-week archives with optimistic concurrency.

    Parameters
    ----------
    store:
        The archive store holding one object per week.
    top_n:
        Size of the summary's top-N tables.
    max_conflict_retries:
        Fresh re-reads allowed after losing a conditional write before
        :class:`MergeConflict` is raised.
    max_store_attempts:
        Attempts per store call before a transient failure becomes
        :class:`StoreUnavailable`.
    backoff_base:
        First backoff delay in seconds, doubled after each transient failure.
    """

    def __init__(
        self,
        store: ArchiveStore,
        *,
        top_n: int = DEFAULT_TOP_N,
        max_conflict_retries: int = 5,
        max_store_attempts: int = 3,
        backoff_base: float = 0.2,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._top_n = top_n
        self._max_conflict_retries = max_conflict_retries
        self._max_store_attempts = max_store_attempts
        self._backoff_base = backoff_base
        self._clock = clock

    @classmethod
    def from_settings(
        cls, store: ArchiveStore, settings: Settings, *, clock: Clock = utc_now
    ) -> ArchiveMergeEngine:
        return cls(
            store,
            top_n=settings.summary_top_n,
            max_conflict_retries=settings.merge_max_conflict_retries,
            max_store_attempts=settings.store_max_attempts,
            backoff_base=settings.store_backoff_base,
            clock=clock,
        )

    async def fetch(self, week: WeekKey) -> WeekArchive:
        """Read the current archive for *week*, empty with no version if absent."""
        stored = await self._call_with_retry(week.label, self._store.get, week.label)
        if stored is None:
            return WeekArchive(week=week, summary=aggregate([], self._top_n))
        return decode_archive(stored)

    async def merge(self, week: WeekKey, new_events: Sequence[CanonicalEvent]) -> MergeResult:
        """Merge *new_events* into the archive for *week*.

        Raises:
            MergeConflict: Every attempt lost its conditional write.
            StoreUnavailable: A store call kept failing transiently.
            StorageError: The stored archive is unreadable or the store
                failed permanently.
        """
        key = week.label
        attempts = self._max_conflict_retries + 1

        for attempt in range(1, attempts + 1):
            current = await self.fetch(week)
            to_add = current.missing(new_events)

            if not to_add:
                logger.debug(
                    "Nothing new for %s (%d events offered)", key, len(new_events),
                    extra={"week": key, "attempt": attempt},
                )
                return MergeResult(
                    week=week,
                    applied_count=0,
                    total_count=len(current.events),
                    summary=current.summary,
                    attempts=attempt,
                )

            merged_events = dict(current.events)
            merged_events.update((e.request_id, e) for e in to_add)
            candidate = WeekArchive(
                week=week,
                events=merged_events,
                summary=aggregate(merged_events.values(), self._top_n),
                version=current.version,
                generated_at=self._clock(),
            )

            landed = await self._call_with_retry(
                key,
                self._store.put_if_version,
                key,
                encode_archive(candidate),
                current.version,
            )
            if landed:
                logger.info(
                    "Merged %d new events into %s (total %d)",
                    len(to_add),
                    key,
                    len(merged_events),
                    extra={"week": key, "attempt": attempt},
                )
                return MergeResult(
                    week=week,
                    applied_count=len(to_add),
                    total_count=len(merged_events),
                    summary=candidate.summary,
                    attempts=attempt,
                )

            logger.warning(
                "Version conflict on %s (attempt %d/%d), re-reading",
                key,
                attempt,
                attempts,
                extra={"week": key, "attempt": attempt},
            )

        raise MergeConflict(key, attempts)

    async def _call_with_retry(
        self,
        key: str,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T:
        """Run a store call, backing off exponentially on transient failures."""
        for attempt in range(self._max_store_attempts):
            try:
                return await operation(*args)
            except TransientStoreError as exc:
                if attempt == self._max_store_attempts - 1:
                    logger.error(
                        "Store call for %s failed after %d attempts: %s",
                        key,
                        self._max_store_attempts,
                        exc,
                        extra={"week": key},
                    )
                    raise StoreUnavailable(key, self._max_store_attempts, exc) from exc
                backoff = self._backoff_base * (2 ** attempt)
                logger.warning(
                    "Store call for %s failed (attempt %d/%d), retrying in %.2fs: %s",
                    key,
                    attempt + 1,
                    self._max_store_attempts,
                    backoff,
                    exc,
                    extra={"week": key},
                )
                await asyncio.sleep(backoff)
        raise StoreUnavailable(key, self._max_store_attempts)
