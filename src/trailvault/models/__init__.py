# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for trailvault."""

from trailvault.models.archive import Summary, WeekArchive, WeekKey
from trailvault.models.event import Actor, CanonicalEvent, Target
from trailvault.models.record import RawAuditRecord, ResourceRef, UserIdentity

__all__ = [
    "Actor",
    "CanonicalEvent",
    "RawAuditRecord",
    "ResourceRef",
    "Summary",
    "Target",
    "UserIdentity",
    "WeekArchive",
    "WeekKey",
]
