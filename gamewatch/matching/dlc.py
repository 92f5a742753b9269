"""Detection of add-on content (DLC, expansions, special editions).

A release that bundles or extends a game must not be grabbed as the base game
and is reported as a ``dlc`` update for games already acquired.
"""

import re
from typing import Pattern, Tuple

ADD_ON_PATTERNS: Tuple[Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bDLC\b",
        r"\bExpansion\b",
        r"\bSeason\s+Pass\b",
        r"\bDeluxe\s+Edition\b",
        r"\bComplete\s+Edition\b",
        r"\bGOTY\b",
        r"\bGame\s+of\s+the\s+Year\b",
        r"\bUltimate\s+Edition\b",
        r"\bGold\s+Edition\b",
        r"\bPremium\s+Edition\b",
        r"\bCollector'?s\s+Edition\b",
        r"\bDefinitive\s+Edition\b",
        r"\bLegendary\s+Edition\b",
    )
)

# Ways a release title attaches extra content after the game's own title.
TRAILING_CONTENT_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"^\s*[-:]\s*\w+"),
    re.compile(r"^\s*\+"),
    re.compile(r"^\s*and\b", re.IGNORECASE),
    re.compile(r"^\s*with\b", re.IGNORECASE),
)

# "-CODEX", "-RUNE": a release-group suffix glued to the title with a hyphen.
_GROUP_TAG = re.compile(r"^-[^\s:+]+$")

MIN_TRAILING_LENGTH = 5


def is_additional_content(release_title: str, catalog_title: str) -> bool:
    """Decide whether ``release_title`` is add-on content for ``catalog_title``.

    Explicit add-on phrases always count. Otherwise the text following the
    game's title is inspected: a subtitle introduced by a dash or colon, a
    ``+`` bundle, or a trailing "and"/"with" clause counts when it is longer
    than five characters. A single hyphen-attached token without whitespace is
    a release-group tag and does not.

    Examples:
        >>> is_additional_content("Game Name - Blood and Wine", "Game Name")
        True
        >>> is_additional_content("Game Name-CODEX", "Game Name")
        False
    """
    if not release_title:
        return False

    if any(pattern.search(release_title) for pattern in ADD_ON_PATTERNS):
        return True

    release_lower = release_title.lower()
    catalog_lower = (catalog_title or "").strip().lower()
    if not catalog_lower:
        return False

    position = release_lower.find(catalog_lower)
    if position < 0:
        return False

    trailing = release_lower[position + len(catalog_lower):].strip()
    if len(trailing) <= MIN_TRAILING_LENGTH:
        return False
    if _GROUP_TAG.match(trailing):
        return False
    return any(pattern.search(trailing) for pattern in TRAILING_CONTENT_PATTERNS)
