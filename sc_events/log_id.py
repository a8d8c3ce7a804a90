# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Deterministic ids for parsed events.

The id depends only on the line's timestamp and its raw text, so re-reading
a resumed or truncated Game.log yields the same ids and consumers can drop
duplicates by id alone.
"""

import hashlib
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DIGEST_LENGTH = 16


def timestamp_to_ms(timestamp: str) -> int:
    """Milliseconds since the epoch for a ``2025-11-02T07:47:09.855Z`` timestamp."""
    dt = datetime.strptime(timestamp, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // timedelta(milliseconds=1)


def generate_id(timestamp: str, line: str) -> str:
    """Stable id for (timestamp, line): ``log-<epoch ms>-<sha1 prefix>``."""
    digest = hashlib.sha1(f"{timestamp}-{line}".encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
    return f"log-{timestamp_to_ms(timestamp)}-{digest}"
