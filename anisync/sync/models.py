"""
Pydantic models for progress synchronization.

These models carry the outcome of a sync attempt, identity resolution,
list-entry updates and the missing-series ledger records.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..anilist.models import SavedListEntry


def _utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class SyncStatus(str, Enum):
    """Terminal status of one sync attempt."""

    SUCCESS = "success"  # Linked by provider id
    SUCCESS_VIA_SEARCH = "success_via_search"  # Found by name search
    NO_IDENTITY = "no_identity"  # Could not be resolved
    ERROR = "error"  # Watch state, list policy or API failure


class SyncResult(BaseModel):
    """Outcome of syncing one series for one user. Never mutated after return."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    series_id: str
    series_name: str = ""
    catalog_id: int | None = None
    last_watched_season: int = 0
    last_watched_episode: int = 0
    status: SyncStatus
    message: str = ""
    raw_response: str | None = None
    error: Exception | None = Field(default=None, exclude=True)

    @property
    def is_success(self) -> bool:
        return self.status in (SyncStatus.SUCCESS, SyncStatus.SUCCESS_VIA_SEARCH)


class ResolutionResult(BaseModel):
    """Outcome of resolving a series to an AniList id."""

    catalog_id: int | None = None
    via_direct_link: bool = False
    searched_name: str | None = None
    matched_title: str | None = None
    matched_by: str | None = None  # provider_id, exact_title, first_candidate

    @property
    def is_found(self) -> bool:
        return self.catalog_id is not None


class ProgressUpdate(BaseModel):
    """Outcome of applying progress to a list entry."""

    media_id: int
    title: str = ""
    progress: int
    created: bool = False
    entry: SavedListEntry
    raw_response: str | None = None


class MissingSeriesEntry(BaseModel):
    """A series that could not be resolved, kept for operator review."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    media_server_id: str = Field(alias="mediaServerId")
    name: str = ""
    premiere_date: str | None = Field(default=None, alias="premiereDate")
    first_seen_at: datetime = Field(default_factory=_utcnow, alias="firstSeenAt")
    alternate_provider_ids: dict[str, str] = Field(default_factory=dict, alias="alternateProviderIds")
    searched_name: str = Field(default="", alias="searchedName")
    reason: str = ""


class LibrarySyncSummary(BaseModel):
    """Counts per status for a batch of sync results."""

    total: int = 0
    success: int = 0
    success_via_search: int = 0
    no_identity: int = 0
    error: int = 0
    unresolved: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def synced(self) -> int:
        return self.success + self.success_via_search

    @classmethod
    def from_results(cls, results: list[SyncResult]) -> "LibrarySyncSummary":
        """Aggregate a list of results."""
        summary = cls(total=len(results))
        for result in results:
            if result.status == SyncStatus.SUCCESS:
                summary.success += 1
            elif result.status == SyncStatus.SUCCESS_VIA_SEARCH:
                summary.success_via_search += 1
            elif result.status == SyncStatus.NO_IDENTITY:
                summary.no_identity += 1
                summary.unresolved.append(result.series_name or result.series_id)
            else:
                summary.error += 1
                summary.failed.append(result.series_name or result.series_id)
        return summary
