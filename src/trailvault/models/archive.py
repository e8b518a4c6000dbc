# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Week partition key, weekly archive, and summary models."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from trailvault.models.event import CanonicalEvent

_WEEK_LABEL_RE = re.compile(r"^(\d{4})-W(\d{2})$")


@dataclass(frozen=True, order=True, slots=True)
class WeekKey:
    """ISO (year, week) pair, ordered chronologically."""

    year: int
    week: int

    @property
    def label(self) -> str:
        """Stable archive key, e.g. ``2024-W03``."""
        return f"{self.year:04d}-W{self.week:02d}"

    @classmethod
    def parse(cls, label: str) -> WeekKey:
        match = _WEEK_LABEL_RE.match(label)
        if match is None or not 1 <= int(match.group(2)) <= 53:
            raise ValueError(f"Not a week label: {label!r}")
        return cls(year=int(match.group(1)), week=int(match.group(2)))

    def __str__(self) -> str:
        return self.label


class Summary(BaseModel):
    """Rollup statistics derived from a week's full event set."""

    model_config = ConfigDict(frozen=True)

    total_events: int = 0
    error_count: int = 0
    top_operations: dict[str, int] = Field(default_factory=dict)
    top_users: dict[str, int] = Field(default_factory=dict)
    top_source_ips: dict[str, int] = Field(default_factory=dict)
    unique_users: int = 0
    unique_ips: int = 0
    top_unmapped_events: dict[str, int] = Field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class WeekArchive:
    """Persisted aggregate for one week.

    ``events`` is keyed by ``request_id``. ``summary`` is always recomputed
    from ``events`` and never patched on its own. ``version`` is the store's
    concurrency token and ``None`` for an archive that does not exist yet.
    """

    week: WeekKey
    events: Mapping[str, CanonicalEvent] = field(default_factory=dict)
    summary: Summary = field(default_factory=Summary)
    version: str | None = None
    generated_at: datetime | None = None

    @property
    def exists(self) -> bool:
        return self.version is not None

    def missing(self, candidates: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
        """Return candidates not yet archived, first occurrence wins within the batch."""
        seen: set[str] = set(self.events)
        fresh: list[CanonicalEvent] = []
        for event in candidates:
            if event.request_id in seen:
                continue
            seen.add(event.request_id)
            fresh.append(event)
        return fresh

    def ordered_events(self) -> list[CanonicalEvent]:
        return sorted(self.events.values(), key=lambda e: e.sort_key)

    def to_document(self) -> dict[str, Any]:
        return {
            "week": self.week.label,
            "generated_at": self.generated_at.isoformat() if self.generated_at else "",
            "total_events": len(self.events),
            "summary": self.summary.model_dump(),
            "events": [e.to_document() for e in self.ordered_events()],
        }
