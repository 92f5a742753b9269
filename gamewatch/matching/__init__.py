"""Release matching: normalization, scoring, quality, versions and add-on detection."""

from .dlc import is_additional_content
from .models import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    MatchResult,
    ScoredRelease,
    TitleScore,
    classify_confidence,
)
from .normalize import normalize_title
from .policy import select_first_qualifying, should_auto_grab
from .quality import QUALITY_RANKING, classify_quality, is_better_quality
from .scoring import ReleaseScorer, score_title
from .versions import compare_versions, is_newer_version, parse_version

__all__ = [
    "normalize_title",
    "classify_quality",
    "is_better_quality",
    "QUALITY_RANKING",
    "parse_version",
    "compare_versions",
    "is_newer_version",
    "is_additional_content",
    "score_title",
    "classify_confidence",
    "ReleaseScorer",
    "MatchResult",
    "ScoredRelease",
    "TitleScore",
    "should_auto_grab",
    "select_first_qualifying",
    "CONFIDENCE_HIGH",
    "CONFIDENCE_MEDIUM",
    "CONFIDENCE_LOW",
]
