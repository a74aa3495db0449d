"""Time helpers: timezone-aware parsing and ages used by freshness and trending."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse ISO strings, epoch seconds/milliseconds, or datetimes into aware UTC datetimes.
    Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if value > 1e11 else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if hasattr(value, "timestamp") and callable(value.timestamp):
        # Firestore DatetimeWithNanoseconds and similar
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    try:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def age_days(ts: Optional[datetime], now: datetime) -> Optional[float]:
    """Age in fractional days, never negative. None when ts is unknown."""
    if ts is None:
        return None
    return max(0.0, (now - ts).total_seconds() / 86400.0)


def age_hours(ts: Optional[datetime], now: datetime) -> Optional[float]:
    if ts is None:
        return None
    return max(0.0, (now - ts).total_seconds() / 3600.0)
