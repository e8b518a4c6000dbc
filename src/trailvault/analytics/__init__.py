# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Archive analytics: summary rollups over canonical events."""

from trailvault.analytics.aggregator import aggregate, top_counts

__all__ = [
    "aggregate",
    "top_counts",
]
