# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the summary aggregator."""

from __future__ import annotations

import json
import random
from collections import Counter
from datetime import UTC, datetime

from trailvault.analytics.aggregator import aggregate, top_counts
from trailvault.core.constants import OperationCategory
from trailvault.models.event import Actor, CanonicalEvent


def _event(
    request_id: str,
    category: OperationCategory = OperationCategory.READ,
    *,
    user: str = "alice",
    ip: str = "203.0.113.10",
    name: str = "GetObject",
    error: str | None = None,
) -> CanonicalEvent:
    return CanonicalEvent(
        request_id=request_id,
        timestamp=datetime(2024, 1, 15, 10, tzinfo=UTC),
        operation_category=category,
        raw_event_name=name,
        actor=Actor(type="IAMUser", name=user, source_ip=ip),
        error_code=error,
    )


class TestAggregate:
    def test_empty(self) -> None:
        summary = aggregate([])
        assert summary.total_events == 0
        assert summary.error_count == 0
        assert summary.top_operations == {}
        assert summary.unique_users == 0

    def test_counts(self) -> None:
        events = [
            _event("r1"),
            _event("r2", OperationCategory.WRITE, user="bob", name="PutObject"),
            _event("r3", OperationCategory.DELETE, user="bob", ip="198.51.100.7", name="DeleteObject"),
            _event("r4", error="AccessDenied"),
            _event("r5", OperationCategory.OTHER, name="PutBucketPolicy", ip=""),
        ]
        summary = aggregate(events)

        assert summary.total_events == 5
        assert summary.error_count == 1
        assert summary.top_operations == {"READ": 2, "DELETE": 1, "OTHER": 1, "WRITE": 1}
        assert summary.top_users == {"alice": 3, "bob": 2}
        assert summary.top_source_ips == {"203.0.113.10": 3, "198.51.100.7": 1, "Unknown": 1}
        assert summary.unique_users == 2
        assert summary.unique_ips == 3
        assert summary.top_unmapped_events == {"PutBucketPolicy": 1}

    def test_duplicate_request_ids_counted_once(self) -> None:
        summary = aggregate([_event("r1"), _event("r1"), _event("r2")])
        assert summary.total_events == 2
        assert summary.top_operations == {"READ": 2}

    def test_top_n_limit(self) -> None:
        events = [_event(f"r{i}", user=f"user{i:02d}") for i in range(15)]
        summary = aggregate(events, top_n=10)
        assert len(summary.top_users) == 10
        assert summary.unique_users == 15

    def test_ties_broken_lexicographically(self) -> None:
        events = [_event("r1", user="carol"), _event("r2", user="alice"), _event("r3", user="bob")]
        summary = aggregate(events, top_n=2)
        assert list(summary.top_users) == ["alice", "bob"]

    def test_output_independent_of_input_order(self) -> None:
        events = [
            _event(f"r{i}", OperationCategory(c), user=u, ip=ip)
            for i, (c, u, ip) in enumerate(
                [
                    ("READ", "alice", "10.0.0.1"),
                    ("WRITE", "bob", "10.0.0.2"),
                    ("READ", "carol", "10.0.0.2"),
                    ("DELETE", "bob", "10.0.0.3"),
                    ("WRITE", "alice", "10.0.0.1"),
                    ("READ", "dave", "10.0.0.4"),
                ]
            )
        ]
        shuffled = list(events)
        random.Random(7).shuffle(shuffled)

        first = json.dumps(aggregate(events).model_dump())
        second = json.dumps(aggregate(shuffled).model_dump())
        assert first == second
        assert json.dumps(aggregate(events).model_dump()) == first


class TestTopCounts:
    def test_count_desc_then_key_asc(self) -> None:
        counter = Counter({"b": 2, "a": 2, "c": 5, "d": 1})
        assert list(top_counts(counter, 3).items()) == [("c", 5), ("a", 2), ("b", 2)]
