# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Week key resolver for archive partitioning.

Weeks follow ISO 8601: they start Monday 00:00 UTC and carry the ISO year of
that Monday, so 2024-12-30 falls in ``2025-W01``.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from trailvault.models.archive import WeekKey

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC datetime (test-friendly helper)."""
    return datetime.now(UTC)


def week_key(timestamp: datetime | None, *, clock: Clock = utc_now) -> WeekKey:
    """Return the week containing *timestamp*.

    A missing timestamp is filed under the week of the processing instant
    reported by *clock*. Naive datetimes are taken as UTC.
    """
    if timestamp is None:
        timestamp = clock()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    iso_year, iso_week, _ = timestamp.astimezone(UTC).isocalendar()
    return WeekKey(year=iso_year, week=iso_week)


def week_start(key: WeekKey) -> datetime:
    """Monday 00:00 UTC opening the given week."""
    monday = datetime.fromisocalendar(key.year, key.week, 1)
    return monday.replace(tzinfo=UTC)


def week_bounds(key: WeekKey) -> tuple[datetime, datetime]:
    """Half-open ``[start, end)`` interval covered by the week."""
    start = week_start(key)
    return start, start + timedelta(days=7)
