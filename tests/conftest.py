"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from anisync.anilist.client import AniListClient
from anisync.anilist.errors import AniListError
from anisync.anilist.models import (
    CatalogIdentity,
    CatalogMedia,
    MediaListStatus,
    SavedListEntry,
)
from anisync.jellyfin.client import JellyfinClient
from anisync.jellyfin.models import EpisodeProgress, SeriesRecord
from anisync.sync.ledger import MissingSeriesLedger

# ============================================================================
# Builders
# ============================================================================


def make_series(
    series_id: str = "series-1",
    name: str = "Naruto",
    premiere_date: str | None = "2002-10-03T00:00:00.0000000Z",
    **provider_ids: str,
) -> SeriesRecord:
    """Build a SeriesRecord the way Jellyfin returns it."""
    return SeriesRecord.model_validate(
        {"Id": series_id, "Name": name, "PremiereDate": premiere_date, "ProviderIds": provider_ids}
    )


def make_episode(season: int, episode: int, played: bool, episode_id: str | None = None) -> EpisodeProgress:
    """Build an EpisodeProgress the way Jellyfin returns it."""
    return EpisodeProgress.model_validate(
        {
            "Id": episode_id or f"ep-{season}-{episode}",
            "Name": f"Episode {episode}",
            "ParentIndexNumber": season,
            "IndexNumber": episode,
            "UserData": {"Played": played},
        }
    )


def make_candidate(
    media_id: int,
    romaji: str | None = None,
    english: str | None = None,
    year: int | None = None,
) -> CatalogIdentity:
    """Build an AniList search candidate."""
    return CatalogIdentity.model_validate(
        {
            "id": media_id,
            "title": {"romaji": romaji, "english": english},
            "startDate": {"year": year},
            "format": "TV",
        }
    )


def json_response(status_code: int, payload: Any) -> httpx.Response:
    """Build an httpx response with a JSON body."""
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", "https://graphql.anilist.co"))


# ============================================================================
# Fakes
# ============================================================================


class FakeAniList:
    """
    In-memory stand-in for AniListClient.

    Keeps a list of entries per media id so repeated updates can be checked
    against the resulting state.
    """

    def __init__(self, titles: dict[int, str] | None = None):
        self.titles = titles or {}
        self.entries: dict[int, SavedListEntry] = {}
        self.search_results: dict[str, list[CatalogIdentity]] = {}
        self.search_calls: list[tuple[str, int | None]] = []
        self.create_calls = 0
        self.update_calls = 0
        self.last_response_text: str | None = None
        self._next_entry_id = 1000

    def get_media(self, media_id: int) -> CatalogMedia:
        if media_id not in self.titles:
            raise AniListError(f"Media query for {media_id}: media not found", status_code=404)
        entry = self.entries.get(media_id)
        return CatalogMedia.model_validate(
            {
                "id": media_id,
                "title": {"romaji": self.titles[media_id]},
                "mediaListEntry": (
                    {"id": entry.id, "progress": entry.progress, "status": entry.status.value}
                    if entry and entry.status
                    else None
                ),
            }
        )

    def search_media(self, search: str, year: int | None = None, per_page: int = 10) -> list[CatalogIdentity]:
        self.search_calls.append((search, year))
        return self.search_results.get(search, [])[:per_page]

    def create_list_entry(
        self, media_id: int, progress: int, status: MediaListStatus = MediaListStatus.CURRENT
    ) -> SavedListEntry:
        self.create_calls += 1
        self._next_entry_id += 1
        entry = SavedListEntry(id=self._next_entry_id, media_id=media_id, status=status, progress=progress)
        self.entries[media_id] = entry
        self.last_response_text = f'{{"data":{{"SaveMediaListEntry":{{"id":{entry.id}}}}}}}'
        return entry

    def update_list_entry(self, entry_id: int, progress: int) -> SavedListEntry:
        self.update_calls += 1
        for media_id, entry in self.entries.items():
            if entry.id == entry_id:
                updated = entry.model_copy(update={"progress": progress})
                self.entries[media_id] = updated
                self.last_response_text = f'{{"data":{{"SaveMediaListEntry":{{"id":{entry_id}}}}}}}'
                return updated
        raise AniListError(f"Update list entry {entry_id}: not found", status_code=404)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sleeps() -> list[float]:
    """Durations recorded by the fake sleep."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], None]:
    """Sleep replacement that records instead of waiting."""
    return sleeps.append


@pytest.fixture
def fake_anilist() -> FakeAniList:
    """Fake AniList account knowing Naruto (20) and One Piece (21)."""
    return FakeAniList(titles={20: "Naruto", 21: "One Piece", 1234: "Cowboy Bebop"})


@pytest.fixture
def mock_anilist_client() -> AniListClient:
    """Mock AniList client for testing without network calls."""
    client = MagicMock(spec=AniListClient)
    client.search_media.return_value = []
    return client


@pytest.fixture
def mock_jellyfin_client() -> JellyfinClient:
    """Mock Jellyfin client for testing without network calls (success path)."""
    client = MagicMock(spec=JellyfinClient)
    client.get_libraries.return_value = []
    client.get_library_series.return_value = []
    client.get_episodes_progress.return_value = []
    return client


@pytest.fixture
def ledger(tmp_path) -> MissingSeriesLedger:
    """Ledger stored in a temporary directory."""
    return MissingSeriesLedger(tmp_path / "missing_anilist_series.json")
