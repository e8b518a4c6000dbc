# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for trailvault."""


class TrailvaultError(Exception):
    """Base exception for all trailvault errors."""


class ConfigurationError(TrailvaultError):
    """Invalid or missing configuration."""


class ParseError(TrailvaultError):
    """Failed to decode a CloudTrail log file."""


class MalformedRecord(TrailvaultError):
    """A raw audit record cannot be minimally parsed."""


class StorageError(TrailvaultError):
    """Archive store operation failed or a stored archive is unreadable."""


class TransientStoreError(StorageError):
    """Retryable store failure (timeout, throttling, locked database)."""


class StoreUnavailable(TrailvaultError):
    """Transient store failures persisted past the retry budget."""

    def __init__(self, key: str, attempts: int, cause: BaseException | None = None) -> None:
        self.key = key
        self.attempts = attempts
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Archive store unavailable for {key} after {attempts} attempts{detail}")


class MergeConflict(TrailvaultError):
    """Conditional writes kept losing to concurrent writers."""

    def __init__(self, key: str, attempts: int) -> None:
        self.key = key
        self.attempts = attempts
        super().__init__(f"Merge into {key} conflicted on all {attempts} attempts")
