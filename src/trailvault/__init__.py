# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""trailvault - Weekly archival engine for cloud audit events."""

__version__ = "0.1.0"

from trailvault.archive import (
    ArchiveMergeEngine,
    ArchiveReader,
    BatchProcessor,
    BatchReport,
    MergeResult,
)
from trailvault.storage import ArchiveStore, MemoryArchiveStore, SQLiteArchiveStore

__all__ = [
    "ArchiveMergeEngine",
    "ArchiveReader",
    "ArchiveStore",
    "BatchProcessor",
    "BatchReport",
    "MemoryArchiveStore",
    "MergeResult",
    "SQLiteArchiveStore",
    "__version__",
]
