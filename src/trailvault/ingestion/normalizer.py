# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Convert raw audit records into classified canonical events."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from trailvault.core.constants import EVENT_CATEGORIES, UNKNOWN, OperationCategory
from trailvault.models.event import Actor, CanonicalEvent, Target
from trailvault.models.record import RawAuditRecord

logger = logging.getLogger("trailvault.ingestion.normalizer")


def classify(event_name: str) -> OperationCategory:
    """Map an event name to its operation category, OTHER when unmapped."""
    return EVENT_CATEGORIES.get(event_name, OperationCategory.OTHER)


def parse_event_time(value: str | None) -> datetime | None:
    """Parse a CloudTrail ``eventTime`` into an aware UTC datetime.

    Naive values are taken as UTC. Returns ``None`` when absent or unparsable.
    """
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        return dt.astimezone(UTC)
    except (ValueError, OverflowError):
        # Out of range once shifted to UTC counts as unparsable
        logger.debug("Unparsable event time %r", value)
        return None


def resolve_actor_name(record: RawAuditRecord) -> str:
    """First non-empty of user name, principal id, ARN; else ``Unknown``."""
    identity = record.user_identity
    if identity is None:
        return UNKNOWN
    for candidate in (identity.user_name, identity.principal_id, identity.arn):
        if candidate:
            return candidate
    return UNKNOWN


def normalize(record: RawAuditRecord) -> CanonicalEvent:
    """Build the canonical event for *record*. Never fails on missing fields."""
    identity = record.user_identity
    params = record.request_parameters or {}

    return CanonicalEvent(
        request_id=record.request_id,
        timestamp=parse_event_time(record.event_time),
        operation_category=classify(record.event_name),
        raw_event_name=record.event_name,
        actor=Actor(
            type=(identity.type if identity is not None else None) or UNKNOWN,
            name=resolve_actor_name(record),
            source_ip=record.source_ip or "",
            user_agent=record.user_agent or "",
        ),
        target=Target(
            resource_name=_as_text(params.get("bucketName")),
            object_key=_as_text(params.get("key")),
            referenced_arns=frozenset(record.resource_arns),
        ),
        region=record.region or "",
        error_code=record.error_code or None,
        error_message=record.error_message or None,
    )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
