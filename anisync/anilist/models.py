"""
Pydantic models for AniList GraphQL responses.
"""

from enum import Enum

from pydantic import BaseModel, Field


class MediaListStatus(str, Enum):
    """Status of a personal list entry."""

    CURRENT = "CURRENT"
    PLANNING = "PLANNING"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
    PAUSED = "PAUSED"
    REPEATING = "REPEATING"


class MediaTitle(BaseModel):
    """Titles of a media entry."""

    model_config = {"extra": "ignore"}

    romaji: str | None = None
    english: str | None = None
    native: str | None = None

    @property
    def display(self) -> str:
        return self.romaji or self.english or self.native or ""


class FuzzyDate(BaseModel):
    """AniList partial date; any component may be missing."""

    model_config = {"extra": "ignore"}

    year: int | None = None


class CatalogIdentity(BaseModel):
    """A search candidate: id, titles and start year."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: int
    title: MediaTitle = Field(default_factory=MediaTitle)
    start_date: FuzzyDate | None = Field(default=None, alias="startDate")
    format: str | None = None
    status: str | None = None

    @property
    def romaji_title(self) -> str | None:
        return self.title.romaji

    @property
    def english_title(self) -> str | None:
        return self.title.english

    @property
    def start_year(self) -> int | None:
        return self.start_date.year if self.start_date else None


class MediaListEntry(BaseModel):
    """The viewer's list entry embedded in a media query."""

    model_config = {"extra": "ignore"}

    id: int
    progress: int | None = None
    status: MediaListStatus | None = None


class CatalogMedia(CatalogIdentity):
    """A media entry with the viewer's list entry, if any."""

    episodes: int | None = None
    media_list_entry: MediaListEntry | None = Field(default=None, alias="mediaListEntry")

    @property
    def in_list(self) -> bool:
        return self.media_list_entry is not None


class SavedListEntry(BaseModel):
    """Result of a SaveMediaListEntry mutation."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: int
    media_id: int | None = Field(default=None, alias="mediaId")
    status: MediaListStatus | None = None
    progress: int | None = None


class Viewer(BaseModel):
    """The user owning the access token."""

    model_config = {"extra": "ignore"}

    id: int
    name: str
