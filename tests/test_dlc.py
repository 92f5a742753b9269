"""Tests for add-on content detection."""

import pytest

from gamewatch.matching.dlc import is_additional_content


class TestIsAdditionalContent:
    """Test suite for is_additional_content."""

    @pytest.mark.parametrize(
        "release_title",
        [
            "Game Name DLC Pack",
            "Game Name Season Pass-GROUP",
            "Game Name Expansion",
            "Game Name GOTY",
            "Game Name Game of the Year",
            "Game Name Deluxe Edition",
            "Game Name Complete Edition",
            "Game Name Ultimate Edition",
            "Game Name Gold Edition",
            "Game Name Premium Edition",
            "Game Name Collector's Edition",
            "Game Name Definitive Edition",
            "Game Name Legendary Edition",
        ],
    )
    def test_explicit_add_on_phrases(self, release_title):
        assert is_additional_content(release_title, "Game Name") is True

    def test_phrases_need_word_boundaries(self):
        assert is_additional_content("Game Name DLCs-free v1.2", "Other Title") is False

    @pytest.mark.parametrize(
        "release_title",
        [
            "Game Name - Blood and Wine",
            "Game Name: Hearts of Stone",
            "Game Name + 5 DLCs",
            "Game Name and the Lost Kingdom",
            "Game Name with Bonus Content",
        ],
    )
    def test_trailing_content(self, release_title):
        assert is_additional_content(release_title, "Game Name") is True

    @pytest.mark.parametrize(
        "release_title",
        [
            "Game Name",
            "Game Name v1.2",
            "Game Name 2",
            "Game Name-CODEX",
            "Game Name-RAZOR1911",
            "Game Name v1.5.78 GOG",
        ],
    )
    def test_base_game_releases(self, release_title):
        assert is_additional_content(release_title, "Game Name") is False

    def test_short_trailing_text_ignored(self):
        """Trailing text of five characters or fewer never counts."""
        assert is_additional_content("Game Name - Abc", "Game Name") is False

    def test_catalog_title_not_in_release(self):
        assert is_additional_content("Other Title - Something Else", "Game Name") is False

    def test_case_insensitive_containment(self):
        assert is_additional_content("GAME NAME - BLOOD AND WINE", "game name") is True

    def test_empty_inputs(self):
        assert is_additional_content("", "Game Name") is False
        assert is_additional_content("Game Name - Blood and Wine", "") is False
