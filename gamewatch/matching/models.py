"""Data models produced by the matching layer."""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from gamewatch.domain.models import CatalogEntry, ReleaseCandidate

CONFIDENCE_HIGH = "high"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_LOW = "low"

HIGH_SCORE = 150
LOW_SCORE = 80
HIGH_WORD_RATIO = 0.8
BASE_SCORE = 100


class TitleScore(NamedTuple):
    """Title similarity: score contribution plus the word-match ratio behind it."""

    score: int
    word_match_ratio: float


def classify_confidence(score: int, word_match_ratio: float) -> str:
    """Map ``(score, word_match_ratio)`` to ``high``, ``medium`` or ``low``.

    High: score of 150 or more, or a ratio of at least 0.8 with a score above
    the base of 100. Low: score under 80. Everything else is medium.
    """
    if score >= HIGH_SCORE:
        return CONFIDENCE_HIGH
    if word_match_ratio >= HIGH_WORD_RATIO and score > BASE_SCORE:
        return CONFIDENCE_HIGH
    if score < LOW_SCORE:
        return CONFIDENCE_LOW
    return CONFIDENCE_MEDIUM


@dataclass(frozen=True)
class MatchResult:
    """Outcome of scoring one release title against one catalog title.

    ``confidence`` is derived from ``score`` and ``word_match_ratio`` on
    access, so it can never disagree with them.
    """

    release_normalized: str
    catalog_normalized: str
    score: int
    word_match_ratio: float
    version: Optional[str] = None
    quality: Optional[str] = None
    is_dlc: bool = False

    @property
    def confidence(self) -> str:
        return classify_confidence(self.score, self.word_match_ratio)

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence == CONFIDENCE_LOW


@dataclass(frozen=True)
class ScoredRelease:
    """A release paired with the catalog entry it was scored against."""

    release: ReleaseCandidate
    entry: CatalogEntry
    result: MatchResult

    @property
    def score(self) -> int:
        return self.result.score

    @property
    def seeders(self) -> Optional[int]:
        return self.release.seeders
