"""Tests for release quality classification."""

import pytest

from gamewatch.matching.quality import (
    QUALITY_DRM_FREE,
    QUALITY_GOG,
    QUALITY_RANKING,
    QUALITY_REPACK,
    QUALITY_SCENE,
    classify_quality,
    is_better_quality,
    quality_rank,
)


class TestClassifyQuality:
    """Test suite for classify_quality."""

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Baldurs.Gate.3.v4.1.1-GOG", QUALITY_GOG),
            ("Some Game DRM Free", QUALITY_DRM_FREE),
            ("Some.Game.DRM-Free.v1.0", QUALITY_DRM_FREE),
            ("Some Game [FitGirl Repack]", QUALITY_REPACK),
            ("Some Game Scene Release", QUALITY_SCENE),
            ("Some.Game-CODEX", None),
            ("", None),
        ],
    )
    def test_classifies(self, title, expected):
        assert classify_quality(title) == expected

    def test_first_trigger_wins(self):
        """A GOG repack is classified GOG: triggers are checked in order."""
        assert classify_quality("Some Game GOG Repack") == QUALITY_GOG

    def test_case_insensitive(self):
        assert classify_quality("some game REPACK") == QUALITY_REPACK


class TestQualityRanking:
    """Ranking and comparison of tiers."""

    def test_ranking_order(self):
        assert QUALITY_RANKING == (QUALITY_SCENE, QUALITY_REPACK, QUALITY_DRM_FREE, QUALITY_GOG)

    def test_unknown_rank(self):
        assert quality_rank(None) == -1
        assert quality_rank("Telesync") == -1

    @pytest.mark.parametrize(
        "new, current, expected",
        [
            (QUALITY_GOG, QUALITY_REPACK, True),
            (QUALITY_REPACK, QUALITY_GOG, False),
            (QUALITY_DRM_FREE, QUALITY_SCENE, True),
            (QUALITY_GOG, QUALITY_GOG, False),
            (QUALITY_GOG, None, True),
            (None, QUALITY_GOG, False),
            (None, None, False),
            ("Telesync", None, True),
            (QUALITY_SCENE, "Telesync", True),
            ("Telesync", QUALITY_SCENE, False),
        ],
    )
    def test_is_better_quality(self, new, current, expected):
        assert is_better_quality(new, current) is expected
