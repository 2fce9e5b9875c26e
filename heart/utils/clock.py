"""Time and numeric helpers shared by the affect components.

All timestamps inside the engine are timezone-aware UTC datetimes.
Persisted data stores them as ISO-8601 strings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(
    value: Union[str, datetime, None],
    default: Optional[datetime] = None,
) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime).

    Falls back to ``default`` (or now) when the value is missing or
    unparseable.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str) and value:
        try:
            # "Z" suffix is what browsers write
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            pass
    return default or utc_now()


def minutes_between(earlier: datetime, later: datetime) -> float:
    """Minutes elapsed from ``earlier`` to ``later`` (never negative)."""
    seconds = (ensure_utc(later) - ensure_utc(earlier)).total_seconds()
    return max(0.0, seconds / 60.0)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))
