"""
Jellyfin CLI commands.

- libraries: List libraries and mark the one used for anime
- episodes: Show a user's watch state for a series
"""

import logging

import typer

from anisync.cli.common import Icons, console, get_jellyfin_client, resolve_user_id, ui
from anisync.config import get_settings
from anisync.jellyfin import JellyfinError, select_last_watched

logger = logging.getLogger(__name__)

# Create Jellyfin sub-app
jellyfin_app = typer.Typer(help="📺 Jellyfin library inspection")


@jellyfin_app.command("libraries")
def jellyfin_libraries():
    """List Jellyfin libraries."""
    names = get_settings().sync.library_names
    try:
        with get_jellyfin_client() as client, ui.spinner("Fetching libraries..."):
            libraries = client.get_libraries()
            anime_library = client.find_library(names)
    except JellyfinError as e:
        ui.error("Failed to list libraries", details=str(e))
        raise typer.Exit(1)

    if not libraries:
        ui.warning("No libraries found")
        return

    table = ui.create_table(f"{Icons.LIBRARY} Libraries", columns=["", "Name", "ID", "Type", "Locations"])
    for library in libraries:
        is_anime = anime_library is not None and library.item_id == anime_library.item_id
        table.add_row(
            Icons.ANIME if is_anime else "",
            library.name,
            library.item_id,
            library.collection_type or "-",
            ", ".join(library.locations) or "-",
        )
    console.print(table)
    ui.muted(f"Anime library is matched by name ({', '.join(names)}) or the tvshows type")


@jellyfin_app.command("episodes")
def jellyfin_episodes(
    series_id: str = typer.Argument(..., help="Jellyfin series id"),
    user: str = typer.Option(..., "--user", "-u", help="Jellyfin username"),
):
    """Show a user's watch state for a series."""
    with get_jellyfin_client() as client:
        user_id = resolve_user_id(client, user)
        try:
            with ui.spinner("Fetching episodes..."):
                episodes = client.get_episodes_progress(series_id, user_id)
        except JellyfinError as e:
            ui.error("Failed to fetch episodes", details=str(e))
            raise typer.Exit(1)

    if not episodes:
        ui.warning("No episodes found")
        return

    last_watched = select_last_watched(episodes)
    table = ui.create_table(f"{Icons.TV} Episodes ({len(episodes)})", columns=["Episode", "Name", "Played"])
    for episode in episodes:
        marker = f"[success]{Icons.SUCCESS}[/success]" if episode.is_played else f"[muted]{Icons.PENDING}[/muted]"
        if last_watched is not None and episode.id == last_watched.id and episode.sort_key == last_watched.sort_key:
            marker += f" {Icons.ARROW_RIGHT} last"
        table.add_row(episode.label, episode.name, marker)
    console.print(table)

    watched = sum(1 for episode in episodes if episode.is_played)
    progress = last_watched.episode_number if last_watched else 0
    ui.info(f"{watched}/{len(episodes)} watched · AniList progress would be [bold]{progress}[/bold]")
