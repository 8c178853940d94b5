"""
Series identity resolution.

Maps a Jellyfin series to an AniList media id. A provider id stored on the
series wins outright; otherwise the name is normalized and searched, with
the premiere year used to disambiguate candidates.
"""

import logging
import re
from typing import TYPE_CHECKING

from ..anilist.errors import AniListError
from ..anilist.models import CatalogIdentity
from ..jellyfin.models import SeriesRecord
from .models import ResolutionResult

if TYPE_CHECKING:
    from ..anilist import AniListClient

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_NAME = "AniList"
YEAR_TOLERANCE = 1

# Applied in order; each strips a trailing qualifier
_NAME_NOISE_PATTERNS = (
    re.compile(r"\s*\([^)]*(?:sub|dub)[^)]*\)\s*$", re.IGNORECASE),  # (Dub), (Subbed), (English Dub)
    re.compile(r"\s+-\s+.*$"),  # " - Alternate Title"
    re.compile(r"\s+Season\s+\d+\s*$", re.IGNORECASE),
    re.compile(r"\s+S\d+\s*$", re.IGNORECASE),
)


def normalize_series_name(name: str) -> str:
    """
    Reduce a Jellyfin series name to an AniList search key.

    Strips dub/sub markers, alternate titles after " - ", and season
    suffixes, then trims whitespace.

    Example:
        >>> normalize_series_name("Naruto (Dub)")
        'Naruto'
    """
    key = name.strip()
    for pattern in _NAME_NOISE_PATTERNS:
        key = pattern.sub("", key)
    return key.strip()


def parse_catalog_id(value: str | None) -> int | None:
    """Parse a provider id value as a positive AniList id."""
    if value is None:
        return None
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    catalog_id = int(value)
    return catalog_id if catalog_id > 0 else None


def years_compatible(start_year: int | None, year: int | None) -> bool:
    """
    Check a candidate's start year against a disambiguation year.

    With no disambiguation year every candidate is compatible; a candidate
    without a start year never is.
    """
    if year is None:
        return True
    if start_year is None:
        return False
    return abs(start_year - year) <= YEAR_TOLERANCE


def is_good_match(candidate: CatalogIdentity, search_key: str, year: int | None) -> bool:
    """Exact (case-insensitive) romaji or English title match within the year tolerance."""
    key = search_key.casefold()
    titles = (candidate.romaji_title, candidate.english_title)
    if not any(title is not None and title.casefold() == key for title in titles):
        return False
    return years_compatible(candidate.start_year, year)


def choose_candidate(
    candidates: list[CatalogIdentity], search_key: str, year: int | None
) -> tuple[CatalogIdentity, str] | None:
    """
    Pick the candidate a search resolves to.

    The first exact title match wins; otherwise the first candidate is used.

    Returns:
        (candidate, matched_by) or None when there are no candidates
    """
    for candidate in candidates:
        if is_good_match(candidate, search_key, year):
            return candidate, "exact_title"
    if candidates:
        return candidates[0], "first_candidate"
    return None


class MediaIdentityResolver:
    """
    Resolve Jellyfin series to AniList ids.

    Example:
        resolver = MediaIdentityResolver(anilist_client)
        result = resolver.resolve(series)
        if result.is_found:
            print(result.catalog_id, result.via_direct_link)
    """

    def __init__(
        self,
        anilist: "AniListClient",
        provider_name: str = DEFAULT_PROVIDER_NAME,
        search_page_size: int = 10,
    ):
        """
        Args:
            anilist: AniList client used for searches
            provider_name: Jellyfin provider id key holding the AniList id
            search_page_size: Maximum candidates per search
        """
        self._anilist = anilist
        self.provider_name = provider_name
        self.search_page_size = search_page_size

    def resolve(self, series: SeriesRecord) -> ResolutionResult:
        """
        Resolve a series.

        Returns:
            ResolutionResult; ``is_found`` is False when every strategy failed,
            and ``searched_name`` then holds the search key that was used
        """
        direct = parse_catalog_id(series.provider_id(self.provider_name))
        if direct is not None:
            logger.debug("%s linked to AniList %d by provider id", series.name, direct)
            return ResolutionResult(catalog_id=direct, via_direct_link=True, matched_by="provider_id")

        search_key = normalize_series_name(series.name)
        year = series.premiere_year
        return self._resolve_by_search(search_key, year)

    def _resolve_by_search(self, search_key: str, year: int | None) -> ResolutionResult:
        not_found = ResolutionResult(searched_name=search_key)
        if not search_key:
            logger.debug("Nothing left to search after normalizing the name")
            return not_found

        try:
            candidates = self._anilist.search_media(search_key, year=year, per_page=self.search_page_size)
        except AniListError as e:
            logger.warning("AniList search for '%s' failed: %s", search_key, e)
            return not_found

        choice = choose_candidate(candidates, search_key, year)
        if choice is None:
            logger.debug("No AniList candidates for '%s' (year=%s)", search_key, year)
            return not_found

        candidate, matched_by = choice
        if matched_by == "first_candidate":
            logger.debug("No exact match for '%s'; using first candidate %d", search_key, candidate.id)
        else:
            logger.debug("'%s' matched AniList %d by title", search_key, candidate.id)
        return ResolutionResult(
            catalog_id=candidate.id,
            searched_name=search_key,
            matched_title=candidate.title.display,
            matched_by=matched_by,
        )
