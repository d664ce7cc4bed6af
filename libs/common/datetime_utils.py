"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: datetime = Field(default_factory=utc_now)
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for record timestamps; naive datetimes break the
    trailing-window comparisons in the stats helpers.
    """
    return datetime.now(timezone.utc)


def from_unix(timestamp: Optional[int]) -> Optional[datetime]:
    """Convert a provider epoch-seconds value to an aware UTC datetime."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (hand-edited content) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
