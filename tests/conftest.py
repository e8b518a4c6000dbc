# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from trailvault.core.config import Settings
from trailvault.storage.memory import MemoryArchiveStore

MONITORED = "orders"

# Wednesday of ISO week 2024-W03
FIXED_NOW = datetime(2024, 1, 17, 12, 0, 0, tzinfo=UTC)


def make_record(
    request_id: str = "r1",
    event_name: str = "GetObject",
    event_time: str | None = "2024-01-15T10:00:00Z",
    *,
    bucket: str | None = MONITORED,
    key: str | None = "2024/file.json",
    **overrides: Any,
) -> dict[str, Any]:
    """Build a CloudTrail S3 data event as delivered in a log file."""
    record: dict[str, Any] = {
        "eventVersion": "1.09",
        "eventSource": "s3.amazonaws.com",
        "eventName": event_name,
        "awsRegion": "us-east-1",
        "sourceIPAddress": "203.0.113.10",
        "userAgent": "aws-cli/2.15.0",
        "userIdentity": {
            "type": "IAMUser",
            "principalId": "AIDAEXAMPLE",
            "arn": "arn:aws:iam::123456789012:user/alice",
            "userName": "alice",
        },
        "requestParameters": {"bucketName": bucket, "key": key} if bucket else {},
        "responseElements": None,
        "requestID": request_id,
        "resources": [
            {"type": "AWS::S3::Object", "ARN": f"arn:aws:s3:::{bucket}/{key}"},
            {"type": "AWS::S3::Bucket", "ARN": f"arn:aws:s3:::{bucket}"},
        ]
        if bucket
        else [],
    }
    if event_time is not None:
        record["eventTime"] = event_time
    record.update(overrides)
    return record


@pytest.fixture
def record_factory() -> Callable[..., dict[str, Any]]:
    return make_record


@pytest.fixture
def settings() -> Settings:
    return Settings(
        monitored_resource=MONITORED,
        store_backend="memory",
        store_backoff_base=0.0,
        batch_deadline_seconds=0,
        _env_file=None,
    )


@pytest.fixture
def memory_store() -> MemoryArchiveStore:
    return MemoryArchiveStore()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
