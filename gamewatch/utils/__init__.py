"""Small shared helpers."""

from .timestamps import (
    age_in_days,
    ensure_utc,
    format_timestamp,
    parse_iso_datetime,
    unix_to_datetime,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "format_timestamp",
    "age_in_days",
    "unix_to_datetime",
]
