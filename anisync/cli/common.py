"""
Common utilities shared across CLI commands.

This module provides:
- Factory functions for API clients, the ledger and the sync engine
- Jellyfin user and library resolution
- Shared console and UI instances
"""

import logging

import typer

from anisync.anilist import AniListClient, RateLimitedExecutor
from anisync.config import Settings, get_settings
from anisync.jellyfin import JellyfinClient, JellyfinError
from anisync.sync import MissingSeriesLedger, SyncEngine
from anisync.utils.ui import Icons, console, ui

__all__ = [
    "console",
    "get_anilist_client",
    "get_anilist_clients",
    "get_engine",
    "get_jellyfin_client",
    "get_ledger",
    "Icons",
    "logger",
    "resolve_library_id",
    "resolve_user_id",
    "ui",
]

logger = logging.getLogger(__name__)


def get_jellyfin_client() -> JellyfinClient:
    """Get configured Jellyfin client.

    Returns:
        JellyfinClient instance with settings from config
    """
    settings = get_settings()
    return JellyfinClient(
        host=settings.jellyfin.host,
        api_key=settings.jellyfin.api_key,
        timeout=settings.jellyfin.timeout,
        verify_tls=settings.jellyfin.verify_tls,
    )


def _build_anilist_client(settings: Settings, token: str) -> AniListClient:
    return AniListClient(
        access_token=token,
        api_url=settings.anilist.api_url,
        timeout=settings.anilist.timeout,
        executor=RateLimitedExecutor(backoff_seconds=settings.sync.rate_limit_backoff_seconds),
    )


def get_anilist_client(username: str) -> AniListClient:
    """Get the AniList client for a Jellyfin user.

    Args:
        username: Jellyfin username

    Returns:
        AniListClient using the user's token (or the global token)

    Raises:
        typer.Exit: If no token is configured for the user
    """
    settings = get_settings()
    token = settings.anilist.token_for_user(username)
    if not token:
        console.print(f"[red]Error:[/red] No AniList token configured for user '{username}'")
        console.print("[dim]Hint: Add the user under anilist.user_tokens in config.yaml or set ANILIST_GLOBAL_TOKEN[/dim]")
        raise typer.Exit(1)
    return _build_anilist_client(settings, token)


def get_anilist_clients(settings: Settings | None = None) -> dict[str, AniListClient]:
    """Build the per-user AniList client registry.

    One client per configured user token, keyed by Jellyfin username.

    Args:
        settings: Settings to use (defaults to the global settings)

    Returns:
        Mapping of Jellyfin username to AniList client
    """
    settings = settings or get_settings()
    clients = {}
    for username, token in settings.anilist.user_tokens.items():
        if not token:
            logger.warning("Empty AniList token for user %s; skipping", username)
            continue
        clients[username] = _build_anilist_client(settings, token)
    logger.debug("Created AniList clients for %d users", len(clients))
    return clients


def get_ledger() -> MissingSeriesLedger:
    """Get the missing-series ledger at the configured path."""
    return MissingSeriesLedger(get_settings().paths.missing_series_file)


def get_engine(jellyfin: JellyfinClient, anilist: AniListClient) -> SyncEngine:
    """Get a sync engine configured from settings."""
    return SyncEngine.from_settings(get_settings(), jellyfin, anilist, ledger=get_ledger())


def resolve_user_id(jellyfin: JellyfinClient, username: str) -> str:
    """Resolve a Jellyfin username to its user id.

    Raises:
        typer.Exit: If the user does not exist
    """
    try:
        user_id = jellyfin.find_user_id(username)
    except JellyfinError as e:
        console.print(f"[red]Error:[/red] Could not list Jellyfin users: {e}")
        raise typer.Exit(1)

    if not user_id:
        console.print(f"[red]Error:[/red] Jellyfin user '{username}' not found")
        raise typer.Exit(1)
    return user_id


def resolve_library_id(jellyfin: JellyfinClient, library_id: str | None) -> tuple[str, str]:
    """Resolve the library to sync, finding the anime library if none is given.

    Args:
        jellyfin: Jellyfin client
        library_id: Explicit library item id, or None to search by name

    Returns:
        (library id, display name)

    Raises:
        typer.Exit: If no library can be found
    """
    if library_id:
        return library_id, library_id

    names = get_settings().sync.library_names
    try:
        library = jellyfin.find_library(names)
    except JellyfinError as e:
        console.print(f"[red]Error:[/red] Could not list Jellyfin libraries: {e}")
        raise typer.Exit(1)

    if library is None:
        console.print("[red]Error:[/red] No anime library found")
        console.print(f"[dim]Hint: Looked for libraries named {', '.join(names)}; pass --library/-l[/dim]")
        raise typer.Exit(1)
    return library.item_id, library.name
