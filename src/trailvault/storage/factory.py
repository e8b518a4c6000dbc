# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Build the archive store selected by configuration."""

from __future__ import annotations

from trailvault.core.config import Settings
from trailvault.core.constants import StoreBackend
from trailvault.core.exceptions import ConfigurationError
from trailvault.storage.base import ArchiveStore


async def open_archive_store(settings: Settings) -> ArchiveStore:
    """Initialise and return the configured :class:`ArchiveStore`.

    The SQLite table is created on first use.
    """
    chosen = settings.store_backend.lower()

    if chosen == StoreBackend.SQLITE:
        from trailvault.storage.sqlite import SQLiteArchiveStore

        return await SQLiteArchiveStore.open(settings.db_path)

    if chosen == StoreBackend.MEMORY:
        from trailvault.storage.memory import MemoryArchiveStore

        return MemoryArchiveStore()

    msg = f"Unknown archive store backend: {chosen!r}. Expected 'sqlite' or 'memory'."
    raise ConfigurationError(msg)
