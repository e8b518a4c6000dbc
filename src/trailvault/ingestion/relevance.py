# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Relevance filter: does a raw record concern the monitored resource?"""

from __future__ import annotations

from trailvault.core.constants import (
    MONITORED_EVENT_SOURCE,
    RESOURCE_ARN_PREFIX,
    RESOURCE_PATH_SEPARATOR,
)
from trailvault.models.record import RawAuditRecord


def is_relevant(record: RawAuditRecord, monitored_resource: str) -> bool:
    """Return True if *record* names *monitored_resource*.

    Records from other event sources are rejected before any field is
    inspected. A record then matches when its request parameters or response
    elements name the resource exactly, or when one of its referenced
    resource identifiers is the resource itself or an object within it.
    """
    if record.event_source != MONITORED_EVENT_SOURCE:
        return False

    if _names_resource(record.request_parameters, monitored_resource):
        return True

    if any(identifier_in_namespace(arn, monitored_resource) for arn in record.resource_arns):
        return True

    return _names_resource(record.response_elements, monitored_resource)


def identifier_in_namespace(identifier: str, resource: str) -> bool:
    """Namespace-prefix match of a resource identifier against *resource*.

    ``orders`` matches ``orders`` and ``orders/2024/file.json`` but not
    ``orders-archive``. A leading ``arn:aws:s3:::`` is ignored.
    """
    name = identifier.removeprefix(RESOURCE_ARN_PREFIX)
    return name == resource or name.startswith(resource + RESOURCE_PATH_SEPARATOR)


def _names_resource(block: dict[str, object] | None, resource: str) -> bool:
    if not block:
        return False
    return block.get("bucketName") == resource
