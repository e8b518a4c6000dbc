# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage layer -- archive store interface and backends."""

from trailvault.storage.base import ArchiveStore, ObjectInfo, StoredObject
from trailvault.storage.factory import open_archive_store
from trailvault.storage.memory import MemoryArchiveStore
from trailvault.storage.sqlite import SQLiteArchiveStore

__all__ = [
    "ArchiveStore",
    "MemoryArchiveStore",
    "ObjectInfo",
    "SQLiteArchiveStore",
    "StoredObject",
    "open_archive_store",
]
