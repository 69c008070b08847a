"""
Time helpers for cache freshness and status display.

All cache timestamps are epoch milliseconds so TTL arithmetic is integer
math, and every consumer takes an injectable clock for testing.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], float]

_HOUR_MS = 60 * 60 * 1000
_DAY_MS = 24 * _HOUR_MS


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def elapsed_ms(start_ms: float, end_ms: Optional[float] = None) -> float:
    """
    Milliseconds elapsed between two epoch-millisecond timestamps.

    Args:
        start_ms: Start timestamp
        end_ms: End timestamp, defaults to now

    Returns:
        Elapsed milliseconds
    """
    if end_ms is None:
        end_ms = now_ms()

    return end_ms - start_ms


def to_datetime(timestamp_ms: float) -> datetime:
    """Convert epoch milliseconds to a UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def format_age(created_at_ms: float, current_ms: Optional[float] = None) -> str:
    """
    Describe how long ago a timestamp was, for the cache status line.

    Args:
        created_at_ms: When the entry was created
        current_ms: Reference time, defaults to now

    Returns:
        "just now", "1 hour ago", "N hours ago", "yesterday" or "N days ago"
    """
    age = elapsed_ms(created_at_ms, current_ms)
    days = int(age // _DAY_MS)

    if days <= 0:
        hours = int(age // _HOUR_MS)
        if hours <= 0:
            return "just now"
        if hours == 1:
            return "1 hour ago"
        return f"{hours} hours ago"

    if days == 1:
        return "yesterday"

    return f"{days} days ago"
