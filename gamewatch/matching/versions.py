"""Version extraction from release titles and version comparison."""

import re
from itertools import zip_longest
from typing import Optional, Pattern, Tuple

_SEP = r"[._\s-]"

# Ordered by priority; the first pattern that matches decides.
VERSION_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(_SEP + r"v(\d+(?:\.\d+)+)", re.IGNORECASE),
    re.compile(_SEP + r"v(\d+)(?:" + _SEP + r"|$)", re.IGNORECASE),
    re.compile(r"^v(\d+(?:\.\d+)*)", re.IGNORECASE),
    re.compile(r"version[.\s_]?(\d+(?:\.\d+)*)", re.IGNORECASE),
    re.compile(_SEP + r"(\d+(?:\.\d+){2,})(?:" + _SEP + r"|$)"),
    re.compile(r"build[.\s_]?(\d+)", re.IGNORECASE),
    re.compile(r"update[.\s_]?(\d+)", re.IGNORECASE),
    re.compile(_SEP + r"u(\d+)(?:" + _SEP + r"|$)", re.IGNORECASE),
    re.compile(_SEP + r"r(\d+)(?:" + _SEP + r"|$)", re.IGNORECASE),
    re.compile(r"patch[.\s_]?(\d+(?:\.\d+)*)", re.IGNORECASE),
)

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


def parse_version(title: str) -> Optional[str]:
    """Extract a version token from a release title.

    Never raises; titles without a recognisable version give None.

    Examples:
        >>> parse_version("Game.Name.v2.0.1.GOG")
        '2.0.1'
        >>> parse_version("Game Name Build 14523")
        '14523'
        >>> parse_version("Game Name GOG") is None
        True
    """
    if not title:
        return None
    for pattern in VERSION_PATTERNS:
        match = pattern.search(title)
        if match:
            return match.group(1)
    return None


def _component(part: str) -> int:
    match = _LEADING_DIGITS.match(part)
    return int(match.group(1)) if match else 0


def compare_versions(a: str, b: str) -> int:
    """Compare dotted versions numerically: -1, 0 or 1.

    Components are read as their leading digits (``"3b"`` is 3, ``"beta"`` is
    0) and the shorter version is padded with zeros, so ``"1.0"`` equals
    ``"1.0.0"``.
    """
    left = [_component(part) for part in (a or "").split(".")]
    right = [_component(part) for part in (b or "").split(".")]
    for x, y in zip_longest(left, right, fillvalue=0):
        if x != y:
            return 1 if x > y else -1
    return 0


def is_newer_version(candidate: Optional[str], installed: Optional[str]) -> bool:
    """True if ``candidate`` is strictly newer than ``installed``; False if either is missing."""
    if not candidate or not installed:
        return False
    return compare_versions(candidate, installed) > 0
