"""
Small helpers for record ids and timestamps.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def sortable_key_suffix() -> str:
    """Millisecond timestamp plus a random suffix; sorts chronologically."""
    return f"{timestamp_ms():013d}-{uuid.uuid4().hex[:12]}"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()
