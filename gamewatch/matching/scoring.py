"""Scoring releases against catalog entries.

``score_title`` compares normalized titles only. ``ReleaseScorer`` layers the
release-level adjustments on top of it (year, quality, seeders, age and size)
and produces the ``MatchResult`` the jobs act on.
"""

from datetime import datetime
from typing import Iterable, Optional

from gamewatch.domain.models import CatalogEntry, ReleaseCandidate
from gamewatch.logging import get_logger
from gamewatch.utils.timestamps import age_in_days

from .dlc import is_additional_content
from .models import BASE_SCORE, MatchResult, ScoredRelease, TitleScore
from .normalize import normalize_title, title_tokens
from .quality import (
    QUALITY_DRM_FREE,
    QUALITY_GOG,
    QUALITY_REPACK,
    QUALITY_SCENE,
    classify_quality,
)
from .versions import parse_version

logger = get_logger(__name__, component="matching")

CONTAINMENT_BONUS = 50
STRONG_OVERLAP_BONUS = 30
PARTIAL_OVERLAP_BONUS = 15
WEAK_OVERLAP_PENALTY = -60

YEAR_BONUS = 20
QUALITY_BONUS = {
    QUALITY_GOG: 50,
    QUALITY_DRM_FREE: 40,
    QUALITY_REPACK: 20,
    QUALITY_SCENE: 10,
}
FEW_SEEDERS = 5
FEW_SEEDERS_PENALTY = -30
MANY_SEEDERS = 20
MANY_SEEDERS_BONUS = 10
STALE_AFTER_DAYS = 730
STALE_PENALTY = -20
MIN_SIZE_GB = 0.1
MAX_SIZE_GB = 200
SIZE_PENALTY = -50


def _significant_words(tokens):
    # Words of one or two characters ("of", "3", "ii") carry little signal,
    # unless they are all the title has.
    significant = [token for token in tokens if len(token) > 2]
    return significant or tokens


def score_title(release_normalized: str, catalog_normalized: str) -> TitleScore:
    """Score how well a release title names a catalog title.

    Both inputs must already be normalized. Starts from 100:

    - catalog title contained as whole words: +50, ratio 1.0
    - else by the share of the catalog's significant words present in the
      release: >= 0.8 gives +30, >= 0.5 gives +15, anything lower -60

    Examples:
        >>> score_title("baldurs gate 3 v4 1 1 gog", "baldurs gate 3")
        TitleScore(score=150, word_match_ratio=1.0)
    """
    if not catalog_normalized:
        return TitleScore(BASE_SCORE + WEAK_OVERLAP_PENALTY, 0.0)

    if f" {catalog_normalized} " in f" {release_normalized} ":
        return TitleScore(BASE_SCORE + CONTAINMENT_BONUS, 1.0)

    wanted = _significant_words(title_tokens(catalog_normalized))
    present = set(title_tokens(release_normalized))
    ratio = sum(1 for word in wanted if word in present) / len(wanted)

    if ratio >= 0.8:
        return TitleScore(BASE_SCORE + STRONG_OVERLAP_BONUS, ratio)
    if ratio >= 0.5:
        return TitleScore(BASE_SCORE + PARTIAL_OVERLAP_BONUS, ratio)
    return TitleScore(BASE_SCORE + WEAK_OVERLAP_PENALTY, ratio)


class ReleaseScorer:
    """Scores releases against catalog entries."""

    def evaluate(
        self,
        release: ReleaseCandidate,
        entry: CatalogEntry,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        """Full score of ``release`` for ``entry``.

        Adjustments on top of ``score_title``: the entry's year appearing in
        the title +20; quality tier GOG +50, DRM-Free +40, Repack +20, Scene
        +10; fewer than 5 seeders -30, 20 or more +10; published over two
        years ago -20; size under 0.1 GB or over 200 GB -50. Seeder, age and
        size adjustments are skipped when the feed did not report the value.
        """
        release_normalized = normalize_title(release.title)
        catalog_normalized = normalize_title(entry.title)
        title_score = score_title(release_normalized, catalog_normalized)
        score = title_score.score

        if entry.year and str(entry.year) in title_tokens(release_normalized):
            score += YEAR_BONUS

        quality = classify_quality(release.title)
        score += QUALITY_BONUS.get(quality, 0)

        if release.seeders is not None:
            if release.seeders < FEW_SEEDERS:
                score += FEW_SEEDERS_PENALTY
            elif release.seeders >= MANY_SEEDERS:
                score += MANY_SEEDERS_BONUS

        age = age_in_days(release.published_at, now)
        if age is not None and age > STALE_AFTER_DAYS:
            score += STALE_PENALTY

        if release.size > 0 and not MIN_SIZE_GB <= release.size_gb <= MAX_SIZE_GB:
            score += SIZE_PENALTY

        return MatchResult(
            release_normalized=release_normalized,
            catalog_normalized=catalog_normalized,
            score=score,
            word_match_ratio=title_score.word_match_ratio,
            version=parse_version(release.title),
            quality=quality,
            is_dlc=is_additional_content(release.title, entry.title),
        )

    def best_match(
        self,
        release: ReleaseCandidate,
        entries: Iterable[CatalogEntry],
        now: Optional[datetime] = None,
    ) -> Optional[ScoredRelease]:
        """Highest-scoring entry for ``release``, ignoring low-confidence matches.

        Ties keep the entry seen first.
        """
        best: Optional[ScoredRelease] = None
        for entry in entries:
            result = self.evaluate(release, entry, now=now)
            if result.is_low_confidence:
                continue
            if best is None or result.score > best.score:
                best = ScoredRelease(release=release, entry=entry, result=result)

        if best is not None:
            logger.debug(
                "Best match selected",
                extra={
                    "event": "matching.best_match",
                    "guid": release.guid,
                    "entry_id": best.entry.id,
                    "score": best.score,
                    "confidence": best.result.confidence,
                },
            )
        return best
