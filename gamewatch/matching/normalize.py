"""Title normalization.

Release titles arrive as ``Baldurs.Gate.3.v4.1.1-GOG`` while the catalog says
``Baldur's Gate 3``; both go through ``normalize_title`` before comparison.
"""

import re
from typing import List

# Apostrophes are removed outright so "Baldur's" and "Baldurs" agree.
_APOSTROPHES = re.compile(r"['‘’`]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(text: str) -> str:
    """Lower-case, drop apostrophes, turn other punctuation into spaces, collapse whitespace.

    Total and idempotent: ``normalize_title(normalize_title(x)) == normalize_title(x)``.

    Examples:
        >>> normalize_title("Baldur's Gate 3")
        'baldurs gate 3'
        >>> normalize_title("Baldurs.Gate.3.v4.1.1-GOG")
        'baldurs gate 3 v4 1 1 gog'
    """
    if not text:
        return ""
    lowered = _APOSTROPHES.sub("", text.lower())
    spaced = _NON_ALNUM.sub(" ", lowered)
    return _WHITESPACE.sub(" ", spaced).strip()


def title_tokens(normalized: str) -> List[str]:
    """Split an already-normalized title into words."""
    return normalized.split() if normalized else []
