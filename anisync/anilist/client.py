"""
AniList GraphQL API client.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from . import queries
from .errors import AniListError, AniListGraphQLError
from .executor import RateLimitedExecutor
from .models import CatalogIdentity, CatalogMedia, MediaListStatus, SavedListEntry, Viewer

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://graphql.anilist.co"


class AniListClient:
    """
    AniList GraphQL API client for one user.

    Uses Bearer token authentication. Every request goes through a
    :class:`RateLimitedExecutor`.
    """

    def __init__(
        self,
        access_token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        executor: RateLimitedExecutor | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the AniList client.

        Args:
            access_token: AniList OAuth access token
            api_url: GraphQL endpoint
            timeout: Request timeout in seconds
            executor: Request executor (defaults to a 10s retry-once executor)
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url
        self.executor = executor or RateLimitedExecutor()
        self.last_response_text: str | None = None

        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def _request(self, query: str, variables: dict[str, Any] | None = None, description: str = "AniList request") -> dict:
        """
        Execute a GraphQL document.

        Args:
            query: GraphQL document
            variables: Variables for the document
            description: Label used in logs and errors

        Returns:
            The ``data`` object of the response

        Raises:
            AniListError: On transport, HTTP or GraphQL errors
        """
        payload = {"query": query, "variables": variables or {}}
        logger.debug("AniList request: %s variables=%s", description, variables)

        response = self.executor.execute(lambda: self._client.post(self.api_url, json=payload), description)
        self.last_response_text = response.text

        try:
            body = response.json()
        except ValueError as e:
            raise AniListError(
                f"{description}: invalid JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from e

        data = body.get("data") if isinstance(body, dict) else None
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors and not data:
            messages = "; ".join(str(err.get("message", err)) for err in errors if isinstance(err, dict))
            raise AniListGraphQLError(
                f"{description}: {messages or 'GraphQL error'}",
                status_code=response.status_code,
                body=response.text,
            )
        if not isinstance(data, dict):
            raise AniListError(f"{description}: response has no data", status_code=response.status_code, body=response.text)

        return data

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "AniListClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _validate(self, model: Any, value: Any, description: str) -> Any:
        try:
            return model.model_validate(value)
        except ValidationError as e:
            raise AniListError(f"{description}: unexpected response shape: {e}", body=self.last_response_text) from e

    # =====================
    # Viewer
    # =====================

    def get_viewer(self) -> Viewer:
        """Get the user owning the access token."""
        data = self._request(queries.VIEWER_QUERY, description="Viewer query")
        return self._validate(Viewer, data.get("Viewer"), "Viewer query")

    # =====================
    # Media
    # =====================

    def get_media(self, media_id: int) -> CatalogMedia:
        """
        Get a media entry with the viewer's list entry.

        Args:
            media_id: AniList media id

        Returns:
            CatalogMedia; ``media_list_entry`` is None when the anime is not in the list
        """
        description = f"Media query for {media_id}"
        data = self._request(queries.MEDIA_QUERY, {"id": media_id}, description=description)
        media = data.get("Media")
        if media is None:
            raise AniListError(f"{description}: media not found", body=self.last_response_text)
        return self._validate(CatalogMedia, media, description)

    def search_media(self, search: str, year: int | None = None, per_page: int = 10) -> list[CatalogIdentity]:
        """
        Search anime by name.

        Args:
            search: Search text
            year: Optional season year filter
            per_page: Maximum number of candidates

        Returns:
            Candidates in the order AniList returns them
        """
        variables: dict[str, Any] = {"search": search, "perPage": per_page}
        if year is not None:
            variables["seasonYear"] = year

        description = f"Search for '{search}'"
        data = self._request(queries.SEARCH_QUERY, variables, description=description)
        page = data.get("Page") or {}
        candidates = [self._validate(CatalogIdentity, item, description) for item in page.get("media") or []]
        logger.debug("Search '%s' (year=%s) returned %d candidates", search, year, len(candidates))
        return candidates

    # =====================
    # List entries
    # =====================

    def create_list_entry(
        self,
        media_id: int,
        progress: int,
        status: MediaListStatus = MediaListStatus.CURRENT,
    ) -> SavedListEntry:
        """
        Add an anime to the viewer's list.

        Args:
            media_id: AniList media id
            progress: Episodes watched
            status: Initial list status

        Returns:
            The saved list entry
        """
        description = f"Create list entry for {media_id}"
        data = self._request(
            queries.CREATE_ENTRY_MUTATION,
            {"mediaId": media_id, "status": status.value, "progress": progress},
            description=description,
        )
        return self._validate(SavedListEntry, data.get("SaveMediaListEntry"), description)

    def update_list_entry(self, entry_id: int, progress: int) -> SavedListEntry:
        """
        Set the progress of an existing list entry.

        Args:
            entry_id: List entry id (not the media id)
            progress: Episodes watched

        Returns:
            The saved list entry
        """
        description = f"Update list entry {entry_id}"
        data = self._request(
            queries.UPDATE_ENTRY_MUTATION,
            {"id": entry_id, "progress": progress},
            description=description,
        )
        return self._validate(SavedListEntry, data.get("SaveMediaListEntry"), description)
