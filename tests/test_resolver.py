"""
Tests for series identity resolution.
Covers name normalization, year tolerance, resolution priority and fallbacks.
"""

import pytest

from anisync.anilist.errors import AniListConnectionError
from anisync.sync.resolver import (
    MediaIdentityResolver,
    choose_candidate,
    is_good_match,
    normalize_series_name,
    parse_catalog_id,
    years_compatible,
)
from conftest import make_candidate, make_series

# -----------------------------------------------------------------------------
# Name normalization
# -----------------------------------------------------------------------------
class TestNormalizeSeriesName:
    @pytest.mark.parametrize(
        "name",
        [
            "Show (Dub)",
            "Show (Subbed)",
            "Show Season 2",
            "Show S2",
            "Show - Alt Title",
            "Show (English Dub)",
            "  Show  ",
            "Show season 12",
        ],
    )
    def test_noise_is_stripped(self, name):
        assert normalize_series_name(name) == "Show"

    def test_plain_name_unchanged(self):
        assert normalize_series_name("Cowboy Bebop") == "Cowboy Bebop"

    def test_hyphenated_title_kept(self):
        assert normalize_series_name("Spider-Man") == "Spider-Man"

    def test_parentheses_without_language_marker_kept(self):
        assert normalize_series_name("Hunter x Hunter (2011)") == "Hunter x Hunter (2011)"

    def test_combined_suffixes(self):
        assert normalize_series_name("Attack on Titan - Shingeki no Kyojin") == "Attack on Titan"
        assert normalize_series_name("Naruto Season 2 (Dub)") == "Naruto"


# -----------------------------------------------------------------------------
# Matching rules
# -----------------------------------------------------------------------------
class TestMatchingRules:
    @pytest.mark.parametrize(
        "start_year,year,expected",
        [
            (2002, 2002, True),
            (2001, 2002, True),
            (2003, 2002, True),
            (2000, 2002, False),
            (2004, 2002, False),
            (None, 2002, False),
            (None, None, True),
            (1990, None, True),
        ],
    )
    def test_year_tolerance(self, start_year, year, expected):
        assert years_compatible(start_year, year) is expected

    def test_romaji_match_case_insensitive(self):
        assert is_good_match(make_candidate(20, romaji="NARUTO", year=2002), "naruto", 2002)

    def test_english_match(self):
        candidate = make_candidate(21, romaji="Shingeki no Kyojin", english="Attack on Titan", year=2013)
        assert is_good_match(candidate, "Attack on Titan", 2013)

    def test_substring_is_not_a_match(self):
        assert not is_good_match(make_candidate(22, romaji="Naruto Shippuden", year=2007), "Naruto", None)

    def test_choose_first_exact_match(self):
        candidates = [
            make_candidate(1, romaji="Naruto: Shippuuden", year=2007),
            make_candidate(2, romaji="Naruto", year=2002),
            make_candidate(3, romaji="Naruto", year=2002),
        ]
        candidate, matched_by = choose_candidate(candidates, "Naruto", 2002)
        assert candidate.id == 2
        assert matched_by == "exact_title"

    def test_choose_falls_back_to_first(self):
        candidates = [make_candidate(7, romaji="Something Else"), make_candidate(8, romaji="Other")]
        candidate, matched_by = choose_candidate(candidates, "Naruto", None)
        assert candidate.id == 7
        assert matched_by == "first_candidate"

    def test_choose_nothing_from_empty(self):
        assert choose_candidate([], "Naruto", None) is None

    @pytest.mark.parametrize("value,expected", [("1234", 1234), (" 20 ", 20), ("", None), ("abc", None), ("0", None), ("²", None), ("١٢", None), (None, None)])
    def test_parse_catalog_id(self, value, expected):
        assert parse_catalog_id(value) == expected


# -----------------------------------------------------------------------------
# Resolver
# -----------------------------------------------------------------------------
class TestMediaIdentityResolver:
    def test_direct_link_skips_search(self, fake_anilist):
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(name="Cowboy Bebop", AniList="1234"))

        assert result.catalog_id == 1234
        assert result.via_direct_link is True
        assert result.matched_by == "provider_id"
        assert fake_anilist.search_calls == []

    def test_provider_name_case_insensitive(self, fake_anilist):
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(anilist="1234"))

        assert result.catalog_id == 1234
        assert fake_anilist.search_calls == []

    def test_invalid_provider_id_falls_back_to_search(self, fake_anilist):
        fake_anilist.search_results["Naruto"] = [make_candidate(20, romaji="Naruto", year=2002)]
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(name="Naruto", AniList="not-a-number"))

        assert result.catalog_id == 20
        assert result.via_direct_link is False

    def test_search_with_year_disambiguation(self, fake_anilist):
        fake_anilist.search_results["Naruto"] = [make_candidate(20, romaji="Naruto", year=2002)]
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(name="Naruto (Dub)", premiere_date="2002-10-03"))

        assert result.catalog_id == 20
        assert result.via_direct_link is False
        assert result.searched_name == "Naruto"
        assert result.matched_by == "exact_title"
        assert fake_anilist.search_calls == [("Naruto", 2002)]

    def test_year_mismatch_falls_back_to_first_candidate(self, fake_anilist):
        fake_anilist.search_results["Hunter x Hunter"] = [
            make_candidate(136, romaji="Hunter x Hunter", year=1999),
            make_candidate(11061, romaji="Hunter x Hunter (2011)", year=2011),
        ]
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(name="Hunter x Hunter", premiere_date="2011-10-02"))

        assert result.catalog_id == 136
        assert result.matched_by == "first_candidate"

    def test_missing_premiere_date_searches_without_year(self, fake_anilist):
        fake_anilist.search_results["Naruto"] = [make_candidate(20, romaji="Naruto", year=2002)]
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(name="Naruto", premiere_date=None))

        assert result.catalog_id == 20
        assert fake_anilist.search_calls == [("Naruto", None)]

    def test_empty_search_is_not_found(self, fake_anilist):
        resolver = MediaIdentityResolver(fake_anilist)

        result = resolver.resolve(make_series(name="Unknown Show"))

        assert not result.is_found
        assert result.searched_name == "Unknown Show"

    def test_search_failure_is_not_found(self, mock_anilist_client):
        mock_anilist_client.search_media.side_effect = AniListConnectionError("down")
        resolver = MediaIdentityResolver(mock_anilist_client)

        result = resolver.resolve(make_series(name="Bleach Season 2"))

        assert not result.is_found
        assert result.searched_name == "Bleach"

    def test_search_page_size_passed(self, mock_anilist_client):
        resolver = MediaIdentityResolver(mock_anilist_client, search_page_size=5)

        resolver.resolve(make_series(name="Naruto", premiere_date=None))

        mock_anilist_client.search_media.assert_called_once_with("Naruto", year=None, per_page=5)
