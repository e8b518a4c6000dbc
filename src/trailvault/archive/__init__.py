# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Weekly archive engine: codec, merge engine, batch processor, and reader."""

from trailvault.archive.codec import decode_archive, encode_archive
from trailvault.archive.merge import ArchiveMergeEngine, MergeResult
from trailvault.archive.processor import BatchProcessor, BatchReport, WeekFailure
from trailvault.archive.reader import ArchiveReader

__all__ = [
    "ArchiveMergeEngine",
    "ArchiveReader",
    "BatchProcessor",
    "BatchReport",
    "MergeResult",
    "WeekFailure",
    "decode_archive",
    "encode_archive",
]
