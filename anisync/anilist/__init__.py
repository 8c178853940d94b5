"""
AniList GraphQL client module.
"""

from .client import AniListClient
from .errors import (
    AniListAuthError,
    AniListConnectionError,
    AniListError,
    AniListGraphQLError,
    AniListRateLimitError,
)
from .executor import RateLimitedExecutor
from .models import (
    CatalogIdentity,
    CatalogMedia,
    MediaListEntry,
    MediaListStatus,
    MediaTitle,
    SavedListEntry,
    Viewer,
)

__all__ = [
    # Client
    "AniListClient",
    "RateLimitedExecutor",
    # Exceptions
    "AniListError",
    "AniListAuthError",
    "AniListConnectionError",
    "AniListGraphQLError",
    "AniListRateLimitError",
    # Models
    "CatalogIdentity",
    "CatalogMedia",
    "MediaListEntry",
    "MediaListStatus",
    "MediaTitle",
    "SavedListEntry",
    "Viewer",
]
