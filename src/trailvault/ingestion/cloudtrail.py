# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CloudTrail log file decoding.

Log files are JSON documents of the form ``{"Records": [...]}``, usually
gzip-compressed when delivered to the log bucket.
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from typing import Any

from trailvault.core.exceptions import ParseError

logger = logging.getLogger("trailvault.ingestion.cloudtrail")

_GZIP_MAGIC = b"\x1f\x8b"


def decode_log_file(data: bytes) -> list[Any]:
    """Return the raw ``Records`` entries of a CloudTrail log file.

    Entries are returned undecoded so that each one can be validated (and
    skipped when malformed) on its own.

    Raises:
        ParseError: If the payload is not (gzipped) JSON with a ``Records`` array.
    """
    if data.startswith(_GZIP_MAGIC):
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise ParseError(f"Corrupt gzip payload: {exc}") from exc

    try:
        document = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"Log file is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise ParseError("Log file must be a JSON object")

    records = document.get("Records")
    if not isinstance(records, list):
        raise ParseError("Log file has no 'Records' array")

    logger.debug("Decoded log file with %d records", len(records))
    return records
