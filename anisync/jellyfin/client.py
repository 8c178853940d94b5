"""
Jellyfin API client.
"""

import logging
from typing import Any

import httpx

from .models import EpisodeProgress, JellyfinUser, Library, SeriesRecord, select_last_watched

logger = logging.getLogger(__name__)


class JellyfinError(Exception):
    """Base exception for Jellyfin API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:
        return self.message


class JellyfinConnectionError(JellyfinError):
    """Connection error."""

    pass


class JellyfinAuthError(JellyfinError):
    """Authentication error."""

    pass


class JellyfinNotFoundError(JellyfinError):
    """Resource not found error."""

    pass


def _normalize_host(host: str) -> str:
    """Strip trailing slashes and default to http:// when no scheme is given."""
    host = host.rstrip("/")
    if "://" in host:
        return host
    return f"http://{host}"


class JellyfinClient:
    """
    Jellyfin API client.

    Authenticates every request with the ``X-Emby-Token`` header.
    """

    def __init__(
        self,
        host: str,
        api_key: str,
        timeout: float = 30.0,
        verify_tls: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the Jellyfin client.

        Args:
            host: Jellyfin server URL (e.g., http://localhost:8096)
            api_key: API key created in the Jellyfin dashboard
            timeout: Request timeout in seconds
            verify_tls: Verify TLS certificates for HTTPS hosts
            transport: Optional httpx transport (used by tests)
        """
        self.host = _normalize_host(host)
        self.api_key = api_key
        self.timeout = timeout

        if not verify_tls:
            logger.warning("TLS certificate verification is DISABLED for Jellyfin at %s", self.host)

        self._client = httpx.Client(
            base_url=self.host,
            headers={
                "X-Emby-Token": api_key,
                "Accept": "application/json",
            },
            timeout=timeout,
            verify=verify_tls,
            transport=transport,
        )

    def _request(self, method: str, endpoint: str, params: dict | None = None) -> Any:
        """
        Make an API request.

        Args:
            method: HTTP method
            endpoint: API endpoint (e.g., /Items)
            params: Query parameters

        Returns:
            Decoded JSON body (dict or list), or None for an empty body

        Raises:
            JellyfinError: On API errors
        """
        logger.debug("Jellyfin API request: %s %s params=%s", method, endpoint, params)

        try:
            response = self._client.request(method=method, url=endpoint, params=params)
        except httpx.ConnectError as e:
            logger.debug("Jellyfin connection error: %s", e)
            raise JellyfinConnectionError(f"Failed to connect to {self.host}: {e}") from e
        except httpx.TimeoutException as e:
            logger.debug("Jellyfin timeout: %s", e)
            raise JellyfinConnectionError(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            logger.debug("Jellyfin transport error: %s", e)
            raise JellyfinConnectionError(f"Request to {self.host} failed: {e}") from e

        if response.status_code in (401, 403):
            logger.debug("Jellyfin auth error: %d", response.status_code)
            raise JellyfinAuthError(
                "Authentication failed. Check your Jellyfin API key.", status_code=response.status_code
            )
        elif response.status_code == 404:
            logger.debug("Jellyfin resource not found: %s", endpoint)
            raise JellyfinNotFoundError(f"Resource not found: {endpoint}", status_code=404)
        elif response.status_code >= 400:
            logger.debug("Jellyfin API error: %d for %s", response.status_code, endpoint)
            raise JellyfinError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                response=response.text or None,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            content_preview = response.text[:200] if response.text else "(empty)"
            raise JellyfinError(
                f"Server returned invalid JSON response. Status: {response.status_code}, "
                f"Content preview: {content_preview}",
                status_code=response.status_code,
            ) from e

    def _get(self, endpoint: str, params: dict | None = None) -> Any:
        """Make a GET request."""
        return self._request("GET", endpoint, params=params)

    @staticmethod
    def _items(data: Any) -> list[dict]:
        """Extract the ``Items`` array from a query result."""
        if not isinstance(data, dict):
            return []
        return data.get("Items") or []

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "JellyfinClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =====================
    # Series
    # =====================

    def get_series(self, series_id: str) -> SeriesRecord | None:
        """
        Get a single series by id.

        Args:
            series_id: Jellyfin series item id

        Returns:
            The series record, or None if no series has that id
        """
        data = self._get(
            "/Items",
            params={
                "ids": series_id,
                "IncludeItemTypes": "Series",
                "Fields": "ProviderIds,PremiereDate",
                "limit": 1,
            },
        )
        items = self._items(data)
        if not items:
            logger.debug("No series found for id %s", series_id)
            return None
        return SeriesRecord.model_validate(items[0])

    def get_provider_id(self, series_id: str, provider: str) -> str | None:
        """Get one provider id of a series (case-insensitive provider name)."""
        series = self.get_series(series_id)
        if series is None:
            return None
        return series.provider_id(provider)

    def get_library_series(self, library_id: str) -> list[SeriesRecord]:
        """
        Get every series under a library.

        Args:
            library_id: Library (virtual folder) item id

        Returns:
            Series in the order Jellyfin returns them
        """
        data = self._get(
            "/Items",
            params={
                "ParentId": library_id,
                "IncludeItemTypes": "Series",
                "Recursive": "true",
                "Fields": "ProviderIds,PremiereDate",
            },
        )
        series = [SeriesRecord.model_validate(item) for item in self._items(data)]
        logger.debug("Found %d series in library %s", len(series), library_id)
        return series

    # =====================
    # Libraries
    # =====================

    def get_libraries(self) -> list[Library]:
        """Get all virtual folders."""
        data = self._get("/Library/VirtualFolders")
        if not isinstance(data, list):
            return []
        return [Library.model_validate(item) for item in data]

    def find_library(self, names: list[str]) -> Library | None:
        """
        Find the anime library.

        A library matches when its name contains one of ``names``
        (case-insensitive) or its collection type is ``tvshows``.

        Args:
            names: Candidate library names (e.g., ["Animes", "Anime"])

        Returns:
            The first matching library, or None
        """
        wanted = [name.lower() for name in names]
        for library in self.get_libraries():
            library_name = library.name.lower()
            if any(name in library_name for name in wanted) or library.is_tv_library:
                logger.debug("Using library %s (%s)", library.name, library.item_id)
                return library
        return None

    # =====================
    # Users
    # =====================

    def get_users(self) -> list[JellyfinUser]:
        """Get all Jellyfin users."""
        data = self._get("/Users")
        if not isinstance(data, list):
            return []
        return [JellyfinUser.model_validate(item) for item in data]

    def find_user_id(self, username: str) -> str | None:
        """Resolve a username to its Jellyfin user id (case-insensitive)."""
        wanted = username.casefold()
        for user in self.get_users():
            if user.name.casefold() == wanted:
                return user.id
        return None

    # =====================
    # Watch state
    # =====================

    def get_episodes_progress(self, series_id: str, user_id: str) -> list[EpisodeProgress]:
        """
        Get the watch state of every episode of a series for one user.

        Args:
            series_id: Jellyfin series item id
            user_id: Jellyfin user id

        Returns:
            Episodes sorted by (season, episode) ascending
        """
        data = self._get(
            f"/Shows/{series_id}/Episodes",
            params={"UserId": user_id, "Fields": "UserData"},
        )
        episodes = [EpisodeProgress.model_validate(item) for item in self._items(data)]
        episodes.sort(key=lambda episode: episode.sort_key)
        logger.debug(
            "Found %d episodes for %s, %d watched",
            len(episodes),
            series_id,
            sum(1 for episode in episodes if episode.is_played),
        )
        return episodes

    def get_last_watched_episode(self, series_id: str, user_id: str) -> EpisodeProgress | None:
        """Get the highest played episode of a series, or None if nothing is played."""
        return select_last_watched(self.get_episodes_progress(series_id, user_id))
