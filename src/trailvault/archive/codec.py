# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Serialize weekly archives to and from their JSON document form."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from trailvault.core.exceptions import StorageError
from trailvault.models.archive import Summary, WeekArchive, WeekKey
from trailvault.models.event import CanonicalEvent
from trailvault.storage.base import StoredObject


def encode_archive(archive: WeekArchive) -> str:
    """Render *archive* as the stable JSON document external tooling reads."""
    return json.dumps(archive.to_document(), indent=2, ensure_ascii=False)


def decode_archive(stored: StoredObject) -> WeekArchive:
    """Rebuild a :class:`WeekArchive` from a stored object.

    The stored version token is carried over so the next write can be
    conditioned on it.

    Raises:
        StorageError: If the body is not a well-formed archive document.
    """
    try:
        document = json.loads(stored.body)
        return _from_document(document, version=stored.version)
    except (ValueError, KeyError, TypeError, ValidationError) as exc:
        raise StorageError(f"Archive {stored.key} is unreadable: {exc}") from exc


def _from_document(document: dict[str, Any], *, version: str) -> WeekArchive:
    week = WeekKey.parse(document["week"])
    events: dict[str, CanonicalEvent] = {}
    for entry in document.get("events", []):
        event = CanonicalEvent.from_document(entry)
        events.setdefault(event.request_id, event)

    generated_at = document.get("generated_at") or None
    return WeekArchive(
        week=week,
        events=events,
        summary=Summary.model_validate(document.get("summary", {})),
        version=version,
        generated_at=datetime.fromisoformat(generated_at) if generated_at else None,
    )
