"""
Time utilities for ledger timestamps and trailing analytics windows.

This module keeps every timestamp the agent produces in UTC and gives the
ledger and the analytics layer a single definition of a trailing window.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be in UTC.

    Args:
        ts: Datetime to normalize

    Returns:
        Timezone-aware UTC datetime
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def window_start(window_ms: Optional[int], now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Compute the inclusive lower bound of a trailing window.

    Args:
        window_ms: Window length in milliseconds, None for no window
        now: Upper bound of the window, defaults to current time

    Returns:
        Start of the window, or None when no window applies or the
        window reaches back past the earliest representable datetime
    """
    if window_ms is None:
        return None

    if now is None:
        now = utc_now()

    try:
        return ensure_utc(now) - timedelta(milliseconds=window_ms)
    except OverflowError:
        return None


def in_window(ts: datetime, start: Optional[datetime], end: datetime) -> bool:
    """Check ``start <= ts <= end``; a missing start means unbounded."""
    ts = ensure_utc(ts)
    if start is not None and ts < start:
        return False
    return ts <= end


def format_iso(ts: datetime, timespec: str = "milliseconds") -> str:
    """
    Format a timestamp as ISO 8601 UTC.

    Args:
        ts: Timestamp to format
        timespec: Precision passed to ``datetime.isoformat``

    Returns:
        String such as ``2024-01-01T12:00:00.000Z``
    """
    return ensure_utc(ts).isoformat(timespec=timespec).replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp, accepting a trailing ``Z``.

    Args:
        value: ISO 8601 string

    Returns:
        Timezone-aware UTC datetime

    Raises:
        ValueError: If the string is not a valid timestamp
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))
