# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Ingestion stage: decode, filter, normalize, and partition audit records."""

from trailvault.ingestion.cloudtrail import decode_log_file
from trailvault.ingestion.normalizer import classify, normalize, parse_event_time
from trailvault.ingestion.relevance import identifier_in_namespace, is_relevant
from trailvault.ingestion.week import week_bounds, week_key, week_start

__all__ = [
    "classify",
    "decode_log_file",
    "identifier_in_namespace",
    "is_relevant",
    "normalize",
    "parse_event_time",
    "week_bounds",
    "week_key",
    "week_start",
]
