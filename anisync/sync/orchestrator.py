"""
Per-series and bulk library synchronization.

Each series goes through the same steps: compute progress from watch state,
resolve the AniList id, then apply progress. Every step's failure becomes a
SyncResult; nothing raised for one series stops the batch.
"""

import logging
import time
from collections.abc import Callable

from ..anilist.errors import AniListError
from ..jellyfin.models import EpisodeProgress, SeriesRecord, select_last_watched
from .coordinator import NotInListError, ProgressSyncCoordinator
from .ledger import MissingSeriesLedger, entry_for_series
from .models import SyncResult, SyncStatus
from .resolver import MediaIdentityResolver

logger = logging.getLogger(__name__)

DEFAULT_PACING_SECONDS = 2.0

WatchStateProvider = Callable[[str], list[EpisodeProgress]]
ProgressCallback = Callable[[int, int, str], None]


class BulkLibrarySyncOrchestrator:
    """
    Sync series to AniList one at a time.

    Example:
        orchestrator = BulkLibrarySyncOrchestrator(resolver, coordinator, ledger)
        results = orchestrator.sync_library(
            series_list,
            lambda series_id: jellyfin.get_episodes_progress(series_id, user_id),
        )
    """

    def __init__(
        self,
        resolver: MediaIdentityResolver,
        coordinator: ProgressSyncCoordinator,
        ledger: MissingSeriesLedger,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            resolver: Identity resolver
            coordinator: List-entry progress coordinator
            ledger: Ledger receiving unresolved series
            pacing_seconds: Delay between consecutive series in a batch
            sleep: Sleep function (tests pass a recorder)
        """
        self._resolver = resolver
        self._coordinator = coordinator
        self._ledger = ledger
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep

    def sync_series(
        self,
        series: SeriesRecord,
        watch_state: WatchStateProvider,
        auto_add: bool = True,
    ) -> SyncResult:
        """
        Sync one series.

        Args:
            series: Series snapshot from Jellyfin
            watch_state: Returns the episode watch state for a series id
            auto_add: Add the anime to the list when missing

        Returns:
            SyncResult with exactly one terminal status
        """
        try:
            last_watched = select_last_watched(watch_state(series.id))
        except Exception as e:
            logger.warning("Could not read watch state for '%s': %s", series.name, e)
            return SyncResult(
                series_id=series.id,
                series_name=series.name,
                status=SyncStatus.ERROR,
                message=f"Could not read watch state: {e}",
                error=e,
            )

        season = last_watched.season_number if last_watched else 0
        progress = last_watched.episode_number if last_watched else 0

        try:
            resolution = self._resolver.resolve(series)
        except Exception as e:
            logger.warning("Could not resolve '%s': %s", series.name, e)
            return self._error_result(series, None, season, progress, f"Could not resolve series: {e}", e)

        catalog_id = resolution.catalog_id
        if catalog_id is None:
            self._ledger.add(entry_for_series(series, resolution.searched_name, self._resolver.provider_name))
            return SyncResult(
                series_id=series.id,
                series_name=series.name,
                last_watched_season=season,
                last_watched_episode=progress,
                status=SyncStatus.NO_IDENTITY,
                message=f"No AniList match for '{resolution.searched_name or series.name}'",
            )

        try:
            update = self._coordinator.apply_progress(catalog_id, progress, auto_add=auto_add)
        except NotInListError as e:
            return self._error_result(series, catalog_id, season, progress, str(e), e)
        except AniListError as e:
            logger.warning("AniList update failed for '%s': %s", series.name, e)
            return self._error_result(series, catalog_id, season, progress, f"AniList update failed: {e}", e)

        status = SyncStatus.SUCCESS if resolution.via_direct_link else SyncStatus.SUCCESS_VIA_SEARCH
        action = "Added to list" if update.created else "Updated"
        return SyncResult(
            series_id=series.id,
            series_name=series.name,
            catalog_id=catalog_id,
            last_watched_season=season,
            last_watched_episode=progress,
            status=status,
            message=f"{action}: progress {progress}",
            raw_response=update.raw_response,
        )

    def sync_library(
        self,
        series_list: list[SeriesRecord],
        watch_state: WatchStateProvider,
        auto_add: bool = True,
        progress_callback: ProgressCallback | None = None,
    ) -> list[SyncResult]:
        """
        Sync every series in order, pausing between series.

        Args:
            series_list: Series to sync
            watch_state: Returns the episode watch state for a series id
            auto_add: Add anime to the list when missing
            progress_callback: Optional callback(current, total, series_name)

        Returns:
            One SyncResult per input series, in input order
        """
        results: list[SyncResult] = []
        total = len(series_list)

        for idx, series in enumerate(series_list):
            if progress_callback:
                progress_callback(idx, total, series.name)

            if idx > 0 and self.pacing_seconds > 0:
                self._sleep(self.pacing_seconds)

            try:
                result = self.sync_series(series, watch_state, auto_add=auto_add)
            except Exception as e:
                logger.warning("Failed to sync series '%s': %s", series.name, e)
                result = SyncResult(
                    series_id=series.id,
                    series_name=series.name,
                    status=SyncStatus.ERROR,
                    message=f"Unexpected failure: {e}",
                    error=e,
                )
            results.append(result)

        if progress_callback:
            progress_callback(total, total, "")

        return results

    @staticmethod
    def _error_result(
        series: SeriesRecord,
        catalog_id: int | None,
        season: int,
        progress: int,
        message: str,
        error: Exception,
    ) -> SyncResult:
        return SyncResult(
            series_id=series.id,
            series_name=series.name,
            catalog_id=catalog_id,
            last_watched_season=season,
            last_watched_episode=progress,
            status=SyncStatus.ERROR,
            message=message,
            error=error,
        )
