"""
Time helpers for provider timestamps and tray display formatting.
"""

import math
from datetime import datetime, timezone


def from_unix_seconds(value: float) -> datetime:
    """
    Convert provider unix seconds into an aware UTC datetime.

    Args:
        value: Seconds since the epoch, possibly fractional

    Returns:
        UTC datetime

    Raises:
        ValueError: If the value is not finite or out of range
    """
    if not math.isfinite(value):
        raise ValueError(f"Non-finite timestamp: {value}")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {value}") from e


def format_clock_time(ts: datetime) -> str:
    """
    Format a timestamp as local wall-clock HH:MM:SS.

    Naive datetimes are taken to already be local time.
    """
    local = ts.astimezone() if ts.tzinfo is not None else ts
    return local.strftime("%H:%M:%S")

