"""
Progress synchronization between Jellyfin and AniList.

Provides identity resolution, list-entry updates, the missing-series ledger
and the per-series / bulk sync flow.
"""

from .coordinator import NotInListError, ProgressSyncCoordinator
from .engine import SyncEngine
from .ledger import MissingSeriesLedger, entry_for_series
from .models import (
    LibrarySyncSummary,
    MissingSeriesEntry,
    ProgressUpdate,
    ResolutionResult,
    SyncResult,
    SyncStatus,
)
from .orchestrator import BulkLibrarySyncOrchestrator
from .resolver import MediaIdentityResolver, normalize_series_name

__all__ = [
    # Services
    "SyncEngine",
    "MediaIdentityResolver",
    "ProgressSyncCoordinator",
    "BulkLibrarySyncOrchestrator",
    "MissingSeriesLedger",
    # Errors
    "NotInListError",
    # Models
    "LibrarySyncSummary",
    "MissingSeriesEntry",
    "ProgressUpdate",
    "ResolutionResult",
    "SyncResult",
    "SyncStatus",
    # Helpers
    "entry_for_series",
    "normalize_series_name",
]
