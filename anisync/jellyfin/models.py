"""
Pydantic models for Jellyfin API responses.
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator


class SeriesRecord(BaseModel):
    """A series item from the Jellyfin library."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: str = Field(alias="Id")
    name: str = Field(default="", alias="Name")
    premiere_date: str | None = Field(default=None, alias="PremiereDate")
    provider_ids: dict[str, str] = Field(default_factory=dict, alias="ProviderIds")

    @field_validator("provider_ids", mode="before")
    @classmethod
    def _drop_null_ids(cls, value: dict | None) -> dict:
        return {key: val for key, val in (value or {}).items() if val is not None}

    def provider_id(self, provider: str) -> str | None:
        """
        Look up a provider id by name, ignoring case.

        Empty values are treated as absent.
        """
        wanted = provider.casefold()
        for key, value in self.provider_ids.items():
            if key.casefold() == wanted and value:
                return value
        return None

    @property
    def premiere_year(self) -> int | None:
        """Year of the premiere date, or None when absent or unparseable."""
        if not self.premiere_date:
            return None
        try:
            return date.fromisoformat(self.premiere_date[:10]).year
        except ValueError:
            return None


class EpisodeUserData(BaseModel):
    """Per-user playback state of an episode."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    played: bool = Field(default=False, alias="Played")


class EpisodeProgress(BaseModel):
    """Watch state of one episode for one user."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: str = Field(default="", alias="Id")
    name: str = Field(default="", alias="Name")
    season_number: int = Field(default=0, alias="ParentIndexNumber")
    episode_number: int = Field(default=0, alias="IndexNumber")
    user_data: EpisodeUserData = Field(default_factory=EpisodeUserData, alias="UserData")

    @field_validator("season_number", "episode_number", mode="before")
    @classmethod
    def _null_index_is_zero(cls, value: int | None) -> int:
        return 0 if value is None else value

    @field_validator("user_data", mode="before")
    @classmethod
    def _null_user_data(cls, value: dict | None) -> dict:
        return value or {}

    @property
    def is_played(self) -> bool:
        return self.user_data.played

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.season_number, self.episode_number)

    @property
    def label(self) -> str:
        return f"S{self.season_number:02d}E{self.episode_number:02d}"


class Library(BaseModel):
    """A Jellyfin virtual folder (library)."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    name: str = Field(default="", alias="Name")
    item_id: str = Field(default="", alias="ItemId")
    collection_type: str | None = Field(default=None, alias="CollectionType")
    locations: list[str] = Field(default_factory=list, alias="Locations")

    @property
    def is_tv_library(self) -> bool:
        return (self.collection_type or "").lower() == "tvshows"


class JellyfinUser(BaseModel):
    """A Jellyfin user account."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: str = Field(alias="Id")
    name: str = Field(default="", alias="Name")


def select_last_watched(episodes: list[EpisodeProgress]) -> EpisodeProgress | None:
    """
    Pick the played episode with the highest (season, episode) pair.

    Args:
        episodes: Episodes of one series, in any order

    Returns:
        The last watched episode, or None when nothing is played
    """
    played = [episode for episode in episodes if episode.is_played]
    if not played:
        return None
    return max(played, key=lambda episode: episode.sort_key)
