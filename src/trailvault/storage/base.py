# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract archive store interface with conditional-write support.

Every backend holds one opaque document body per key and hands out a version
token with each read. Writers pass the token back to ``put_if_version`` so a
write only lands if nobody else wrote in between.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ObjectInfo:
    """Listing entry for a stored archive object."""

    key: str
    version: str
    last_modified: datetime
    size: int


@dataclass(frozen=True, slots=True)
class StoredObject:
    """A stored archive body together with its concurrency token."""

    key: str
    body: str
    version: str
    last_modified: datetime


class ArchiveStore(abc.ABC):
    """Abstract base class for archive stores.

    Implementations raise :class:`~trailvault.core.exceptions.TransientStoreError`
    for retryable failures (timeouts, throttling, busy databases) and
    :class:`~trailvault.core.exceptions.StorageError` for everything else.
    """

    @abc.abstractmethod
    async def get(self, key: str) -> StoredObject | None:
        """Fetch the object at *key*.

        Returns:
            The stored object, or ``None`` if *key* has never been written.
        """

    @abc.abstractmethod
    async def put_if_version(
        self,
        key: str,
        body: str,
        expected_version: str | None,
    ) -> bool:
        """Write *body* only if the stored version equals *expected_version*.

        Args:
            key: Archive key.
            body: Serialized archive document.
            expected_version: Version read before the write, or ``None`` to
                create the object only if it does not exist yet.

        Returns:
            ``True`` if the write landed, ``False`` on a version mismatch.
        """

    @abc.abstractmethod
    async def list_objects(self) -> list[ObjectInfo]:
        """Return every stored object, ordered by key."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release any resources held by the store."""

    @property
    @abc.abstractmethod
    def backend_name(self) -> str:
        """Return ``'memory'`` or ``'sqlite'``."""
