"""UTC timestamp helpers.

All datetimes inside gamewatch are timezone-aware UTC. Feed and download
clients hand back whatever their upstream produced, so everything coming in
goes through ``ensure_utc`` or ``parse_iso_datetime`` first.
"""

from datetime import datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Make ``dt`` aware UTC. Naive values are taken to already be UTC.

    Example:
        >>> ensure_utc(datetime(2025, 3, 1, 12, 0)).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into aware UTC.

    Accepts full timestamps with or without offset and bare dates. Returns
    None for empty or unparseable input instead of raising, since publish
    dates on indexer feeds are frequently junk.
    """
    if not value or not value.strip():
        return None

    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for pattern in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"):
        try:
            return ensure_utc(datetime.strptime(value.strip(), pattern))
        except ValueError:
            continue
    return None


def format_timestamp(dt: datetime, include_microseconds: bool = False) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SSZ`` (optionally with microseconds)."""
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    if include_microseconds:
        return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def age_in_days(dt: Optional[datetime], now: Optional[datetime] = None) -> Optional[float]:
    """Days elapsed between ``dt`` and ``now`` (default: current time).

    Args:
        dt: Earlier moment; None yields None
        now: Reference moment

    Returns:
        Fractional number of days, negative when ``dt`` lies in the future
    """
    if dt is None:
        return None
    reference = ensure_utc(now) if now is not None else utc_now()
    return (reference - ensure_utc(dt)).total_seconds() / 86400


def unix_to_datetime(seconds: Union[int, float]) -> datetime:
    """Convert a Unix epoch value to aware UTC."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)
