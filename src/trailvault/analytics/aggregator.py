# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Summary aggregator: rollup statistics over a week's event set."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from trailvault.core.constants import DEFAULT_TOP_N, UNKNOWN, OperationCategory
from trailvault.models.archive import Summary
from trailvault.models.event import CanonicalEvent


def aggregate(events: Iterable[CanonicalEvent], top_n: int = DEFAULT_TOP_N) -> Summary:
    """Compute the summary for *events*.

    Pure and deterministic: top-N tables are ordered by descending count with
    ties broken by key, so the same event set always yields the same summary
    regardless of iteration order. Events sharing a ``request_id`` are
    counted once.
    """
    operations: Counter[str] = Counter()
    users: Counter[str] = Counter()
    ips: Counter[str] = Counter()
    unmapped: Counter[str] = Counter()
    errors = 0
    seen: set[str] = set()

    for event in events:
        if event.request_id in seen:
            continue
        seen.add(event.request_id)

        operations[event.operation_category.value] += 1
        users[event.actor.name or UNKNOWN] += 1
        ips[event.actor.source_ip or UNKNOWN] += 1
        if event.operation_category == OperationCategory.OTHER:
            unmapped[event.raw_event_name or UNKNOWN] += 1
        if event.is_error:
            errors += 1

    return Summary(
        total_events=len(seen),
        error_count=errors,
        top_operations=top_counts(operations, top_n),
        top_users=top_counts(users, top_n),
        top_source_ips=top_counts(ips, top_n),
        unique_users=len(users),
        unique_ips=len(ips),
        top_unmapped_events=top_counts(unmapped, top_n),
    )


def top_counts(counter: Counter[str], limit: int) -> dict[str, int]:
    """Return the *limit* largest entries, count descending then key ascending."""
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return dict(ranked[:limit])
