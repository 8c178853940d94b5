"""
Progress synchronization engine.

Binds one Jellyfin client, one user's AniList client and the missing-series
ledger into the operations called by webhooks and the CLI.
"""

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..jellyfin.client import JellyfinError
from ..jellyfin.models import SeriesRecord
from ..utils.logging import log_error, log_success, log_warning
from .coordinator import ProgressSyncCoordinator
from .ledger import MissingSeriesLedger
from .models import LibrarySyncSummary, ResolutionResult, SyncResult, SyncStatus
from .orchestrator import DEFAULT_PACING_SECONDS, BulkLibrarySyncOrchestrator, ProgressCallback
from .resolver import DEFAULT_PROVIDER_NAME, MediaIdentityResolver

if TYPE_CHECKING:
    from ..anilist import AniListClient
    from ..config import Settings
    from ..jellyfin import JellyfinClient

logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Sync Jellyfin watch progress to one AniList account.

    Example:
        engine = SyncEngine(jellyfin, anilist, ledger)
        result = engine.sync_one_series(series_id, user_id)
        print(result.status, result.message)
    """

    def __init__(
        self,
        jellyfin: "JellyfinClient",
        anilist: "AniListClient",
        ledger: MissingSeriesLedger,
        provider_name: str = DEFAULT_PROVIDER_NAME,
        search_page_size: int = 10,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._jellyfin = jellyfin
        self._anilist = anilist
        self.ledger = ledger
        self.resolver = MediaIdentityResolver(anilist, provider_name=provider_name, search_page_size=search_page_size)
        self.coordinator = ProgressSyncCoordinator(anilist)
        self.orchestrator = BulkLibrarySyncOrchestrator(
            self.resolver,
            self.coordinator,
            ledger,
            pacing_seconds=pacing_seconds,
            sleep=sleep,
        )

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        jellyfin: "JellyfinClient",
        anilist: "AniListClient",
        ledger: MissingSeriesLedger | None = None,
    ) -> "SyncEngine":
        """Build an engine using the sync section of the settings."""
        return cls(
            jellyfin,
            anilist,
            ledger or MissingSeriesLedger(settings.paths.missing_series_file),
            provider_name=settings.sync.provider_name,
            search_page_size=settings.sync.search_page_size,
            pacing_seconds=settings.sync.pacing_seconds,
        )

    def resolve(self, series: SeriesRecord) -> ResolutionResult:
        """Resolve a series to an AniList id without touching the list."""
        return self.resolver.resolve(series)

    def sync_one_series(self, series_id: str, user_id: str, auto_add: bool = True) -> SyncResult:
        """
        Sync one series for one Jellyfin user.

        Args:
            series_id: Jellyfin series id
            user_id: Jellyfin user id whose watch state is read
            auto_add: Add the anime to the list when missing

        Returns:
            SyncResult; Jellyfin failures produce status ERROR
        """
        try:
            series = self._jellyfin.get_series(series_id)
        except JellyfinError as e:
            logger.warning("Could not load series %s from Jellyfin: %s", series_id, e)
            return SyncResult(
                series_id=series_id,
                status=SyncStatus.ERROR,
                message=f"Could not load series from Jellyfin: {e}",
                error=e,
            )

        if series is None:
            return SyncResult(
                series_id=series_id,
                status=SyncStatus.ERROR,
                message=f"Series {series_id} not found in Jellyfin",
            )

        try:
            result = self.orchestrator.sync_series(
                series,
                lambda sid: self._jellyfin.get_episodes_progress(sid, user_id),
                auto_add=auto_add,
            )
        except Exception as e:
            logger.warning("Failed to sync series '%s': %s", series.name, e)
            result = SyncResult(
                series_id=series.id,
                series_name=series.name,
                status=SyncStatus.ERROR,
                message=f"Unexpected failure: {e}",
                error=e,
            )
        self._log_result(result)
        return result

    def sync_library(
        self,
        library_id: str,
        user_id: str,
        auto_add: bool = True,
        progress_callback: ProgressCallback | None = None,
    ) -> list[SyncResult]:
        """
        Sync every series of a library for one Jellyfin user.

        Args:
            library_id: Jellyfin library item id
            user_id: Jellyfin user id whose watch state is read
            auto_add: Add anime to the list when missing
            progress_callback: Optional callback(current, total, series_name)

        Returns:
            One SyncResult per series; empty when the library cannot be listed
        """
        try:
            series_list = self._jellyfin.get_library_series(library_id)
        except JellyfinError as e:
            logger.error("Could not list series of library %s: %s", library_id, e)
            return []

        logger.info("Syncing %d series from library %s", len(series_list), library_id)
        results = self.orchestrator.sync_library(
            series_list,
            lambda sid: self._jellyfin.get_episodes_progress(sid, user_id),
            auto_add=auto_add,
            progress_callback=progress_callback,
        )
        self._log_summary(self.summarize(results))
        return results

    @staticmethod
    def summarize(results: list[SyncResult]) -> LibrarySyncSummary:
        """Count results per status."""
        return LibrarySyncSummary.from_results(results)

    @staticmethod
    def _log_result(result: SyncResult) -> None:
        name = result.series_name or result.series_id
        if result.is_success:
            log_success("%s: %s", name, result.message, logger=logger)
        elif result.status == SyncStatus.NO_IDENTITY:
            log_warning("%s: %s", name, result.message, logger=logger)
        else:
            log_error("%s: %s", name, result.message, logger=logger)

    @staticmethod
    def _log_summary(summary: LibrarySyncSummary) -> None:
        logger.info(
            "Library sync finished: %d series, %d linked, %d via search, %d not found, %d errors",
            summary.total,
            summary.success,
            summary.success_via_search,
            summary.no_identity,
            summary.error,
        )
        if summary.unresolved:
            logger.warning("Not found on AniList: %s", ", ".join(summary.unresolved))
        if summary.failed:
            logger.warning("Failed: %s", ", ".join(summary.failed))
