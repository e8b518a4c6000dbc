# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Canonical event model and its archive document layout."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from trailvault.core.constants import UNKNOWN, OperationCategory


class Actor(BaseModel):
    """Who performed the operation and from where."""

    model_config = ConfigDict(frozen=True)

    type: str = UNKNOWN
    name: str = UNKNOWN
    source_ip: str = ""
    user_agent: str = ""


class Target(BaseModel):
    """What the operation touched."""

    model_config = ConfigDict(frozen=True)

    resource_name: str = ""
    object_key: str = ""
    referenced_arns: frozenset[str] = Field(default_factory=frozenset)


class CanonicalEvent(BaseModel):
    """Normalized, classified representation of one audit record.

    ``request_id`` is the sole identity: two events with the same id are the
    same physical operation. ``timestamp`` is ``None`` when the source time
    could not be parsed.
    """

    model_config = ConfigDict(frozen=True)

    request_id: str
    timestamp: datetime | None = None
    operation_category: OperationCategory = OperationCategory.OTHER
    raw_event_name: str = ""
    actor: Actor = Field(default_factory=Actor)
    target: Target = Field(default_factory=Target)
    region: str = ""
    error_code: str | None = None
    error_message: str | None = None

    @property
    def is_error(self) -> bool:
        return bool(self.error_code)

    @property
    def sort_key(self) -> tuple[str, str]:
        ts = self.timestamp.isoformat() if self.timestamp is not None else ""
        return (ts, self.request_id)

    def to_document(self) -> dict[str, Any]:
        """Render the who/what/how/response layout read by query tooling."""
        return {
            "timestamp": _format_timestamp(self.timestamp),
            "operation": self.operation_category.value,
            "event_name": self.raw_event_name,
            "who": {
                "user_type": self.actor.type,
                "user_name": self.actor.name,
                "source_ip": self.actor.source_ip,
            },
            "what": {
                "resources": sorted(self.target.referenced_arns),
                "bucket": self.target.resource_name,
                "key": self.target.object_key,
            },
            "how": {
                "user_agent": self.actor.user_agent,
                "request_id": self.request_id,
                "aws_region": self.region,
            },
            "response": {
                "error_code": self.error_code or "",
                "error_message": self.error_message or "",
            },
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> CanonicalEvent:
        who = doc.get("who") or {}
        what = doc.get("what") or {}
        how = doc.get("how") or {}
        response = doc.get("response") or {}
        operation = doc.get("operation", OperationCategory.OTHER.value)
        return cls(
            request_id=how["request_id"],
            timestamp=_parse_document_timestamp(doc.get("timestamp", "")),
            operation_category=OperationCategory(operation),
            raw_event_name=doc.get("event_name", ""),
            actor=Actor(
                type=who.get("user_type", UNKNOWN),
                name=who.get("user_name", UNKNOWN),
                source_ip=who.get("source_ip", ""),
                user_agent=how.get("user_agent", ""),
            ),
            target=Target(
                resource_name=what.get("bucket", ""),
                object_key=what.get("key", ""),
                referenced_arns=frozenset(what.get("resources", [])),
            ),
            region=how.get("aws_region", ""),
            error_code=response.get("error_code") or None,
            error_message=response.get("error_message") or None,
        )


def _format_timestamp(ts: datetime | None) -> str:
    if ts is None:
        return ""
    return ts.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _parse_document_timestamp(value: str) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
