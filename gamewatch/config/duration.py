"""Duration strings used throughout the configuration file.

Two spellings are accepted everywhere a duration is configured:

- compact: ``30s``, ``15m``, ``6h``, ``1d`` and combinations such as ``1h30m``
- ISO-8601: ``PT30S``, ``PT15M``, ``PT6H``, ``P1D``, ``P1DT12H``
"""

import re

_ISO_PATTERN = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$"
)
_COMPACT_PART = re.compile(r"(\d+)\s*([smhd])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed or is out of range."""


def parse_duration(duration_str: str) -> int:
    """Convert a duration string to whole seconds.

    Args:
        duration_str: Compact or ISO-8601 duration

    Returns:
        Number of seconds, always positive

    Raises:
        DurationParseError: On empty, malformed or zero-length durations

    Examples:
        >>> parse_duration("15m")
        900
        >>> parse_duration("PT1H30M")
        5400
    """
    text = duration_str.strip() if isinstance(duration_str, str) else ""
    if not text:
        raise DurationParseError("Duration string cannot be empty")

    if text.upper().startswith("P"):
        seconds = _parse_iso8601(text)
    else:
        seconds = _parse_compact(text)

    if seconds == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")
    return seconds


def _parse_iso8601(text: str) -> int:
    match = _ISO_PATTERN.match(text.upper())
    if not match or text.upper() in ("P", "PT"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{text}'. "
            "Expected format like 'P1D', 'PT6H', 'PT15M' or 'PT30S'"
        )
    days, hours, minutes, seconds = match.groups()
    total = int(days or 0) * 86400 + int(hours or 0) * 3600 + int(minutes or 0) * 60
    if seconds:
        total += int(float(seconds))
    return total


def _parse_compact(text: str) -> int:
    lowered = text.lower()
    parts = _COMPACT_PART.findall(lowered)
    if not parts:
        raise DurationParseError(
            f"Invalid duration format: '{text}'. "
            "Expected format like '30s', '15m', '6h', '1d' or combinations like '1h30m'"
        )

    # findall skips anything it cannot match, so make sure nothing was skipped.
    if "".join(number + unit for number, unit in parts) != re.sub(r"\s+", "", lowered):
        raise DurationParseError(
            f"Invalid characters in duration: '{text}'. "
            "Use only digits and units: s (seconds), m (minutes), h (hours), d (days)"
        )

    return sum(int(number) * _UNIT_SECONDS[unit] for number, unit in parts)


def validate_duration_range(
    duration_seconds: int,
    min_seconds: int,
    max_seconds: int,
    label: str = "Interval",
) -> None:
    """Raise ``DurationParseError`` unless ``min_seconds <= duration_seconds <= max_seconds``."""
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"{label} too short: {format_duration(duration_seconds)}. "
            f"Minimum is {format_duration(min_seconds)}."
        )
    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"{label} too long: {format_duration(duration_seconds)}. "
            f"Maximum is {format_duration(max_seconds)}."
        )


def format_duration(seconds: int) -> str:
    """Render seconds in the largest whole unit, e.g. ``"15 minutes"``."""
    for unit_seconds, name in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit_seconds:
            count = seconds // unit_seconds
            return f"{count} {name}{'s' if count != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
