"""
Jellyfin API client module.
"""

from .client import (
    JellyfinAuthError,
    JellyfinClient,
    JellyfinConnectionError,
    JellyfinError,
    JellyfinNotFoundError,
)
from .models import EpisodeProgress, JellyfinUser, Library, SeriesRecord, select_last_watched

__all__ = [
    # Client
    "JellyfinClient",
    # Exceptions
    "JellyfinError",
    "JellyfinAuthError",
    "JellyfinConnectionError",
    "JellyfinNotFoundError",
    # Models
    "EpisodeProgress",
    "JellyfinUser",
    "Library",
    "SeriesRecord",
    "select_last_watched",
]
