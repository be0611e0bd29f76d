"""UTC time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def utc_now_ms() -> int:
    """Return the current time in epoch milliseconds."""
    return int(utc_now().timestamp() * 1000)


def ms_to_datetime(value: int) -> datetime:
    """Convert epoch milliseconds to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
