"""
Sync CLI commands.

Commands for pushing Jellyfin progress to AniList:
- series: Sync one series for a user
- library: Sync every series of the anime library
- resolve: Show which AniList entry a series maps to
- search: Show AniList search candidates for a name
"""

import logging

import typer
from rapidfuzz import fuzz
from rich.markup import escape

from anisync.anilist import AniListError
from anisync.cli.common import (
    Icons,
    console,
    get_anilist_client,
    get_engine,
    get_jellyfin_client,
    resolve_library_id,
    resolve_user_id,
    ui,
)
from anisync.config import get_settings
from anisync.jellyfin import JellyfinError
from anisync.sync import SyncEngine, SyncResult, SyncStatus, normalize_series_name
from anisync.sync.resolver import choose_candidate

logger = logging.getLogger(__name__)

# Create Sync sub-app
sync_app = typer.Typer(help="🔄 Sync Jellyfin watch progress to AniList")


def _print_result(result: SyncResult) -> None:
    """Print one sync result."""
    episode = f"S{result.last_watched_season:02d}E{result.last_watched_episode:02d}"
    details = f"AniList {result.catalog_id} · last watched {episode}" if result.catalog_id else f"last watched {episode}"
    name = result.series_name or result.series_id
    if result.is_success:
        ui.success(f"[bold]{name}[/bold]: {result.message}", details=details)
    elif result.status == SyncStatus.NO_IDENTITY:
        ui.warning(f"[bold]{name}[/bold]: {result.message}", details="Recorded in the missing-series ledger")
    else:
        ui.error(f"{name}: {result.message}", details=details)


@sync_app.command("series")
def sync_series(
    series_id: str = typer.Argument(..., help="Jellyfin series id"),
    user: str = typer.Option(..., "--user", "-u", help="Jellyfin username"),
    auto_add: bool | None = typer.Option(
        None, "--auto-add/--no-auto-add", help="Add to the AniList list when missing (default: user setting)"
    ),
):
    """Sync one series to AniList."""
    settings = get_settings()
    if auto_add is None:
        auto_add = settings.anilist.auto_add_for_user(user)

    with get_jellyfin_client() as jellyfin, get_anilist_client(user) as anilist:
        user_id = resolve_user_id(jellyfin, user)
        engine = get_engine(jellyfin, anilist)
        with ui.spinner(f"Syncing series {series_id}..."):
            result = engine.sync_one_series(series_id, user_id, auto_add=auto_add)

    _print_result(result)
    if not result.is_success:
        raise typer.Exit(1)


@sync_app.command("library")
def sync_library(
    user: str = typer.Option(..., "--user", "-u", help="Jellyfin username"),
    library_id: str | None = typer.Option(
        None, "--library", "-l", help="Library id (default: first library matching sync.library_names)"
    ),
    auto_add: bool | None = typer.Option(
        None, "--auto-add/--no-auto-add", help="Add to the AniList list when missing (default: user setting)"
    ),
):
    """Sync every series of the anime library to AniList."""
    settings = get_settings()
    if auto_add is None:
        auto_add = settings.anilist.auto_add_for_user(user)

    with get_jellyfin_client() as jellyfin, get_anilist_client(user) as anilist:
        user_id = resolve_user_id(jellyfin, user)
        library_id, library_name = resolve_library_id(jellyfin, library_id)
        engine = get_engine(jellyfin, anilist)

        ui.header("Library Sync", subtitle=f"{library_name} → AniList ({user})", icon=Icons.SYNC)

        with ui.progress() as progress:
            task = progress.add_task(f"{Icons.SYNC} Syncing...", total=None)

            def progress_callback(current: int, total: int, name: str) -> None:
                progress.update(task, completed=current, total=total, description=f"{Icons.SYNC} {name or 'Done'}")

            results = engine.sync_library(library_id, user_id, auto_add=auto_add, progress_callback=progress_callback)

    if not results:
        ui.warning("No series synced", details="The library is empty or could not be listed")
        raise typer.Exit(1)

    table = ui.create_table(f"Sync Results ({len(results)} series)", columns=["Series", "Status", "AniList", "Episode", "Message"])
    for result in results:
        table.add_row(
            result.series_name or result.series_id,
            ui.sync_status_badge(result.status.value),
            str(result.catalog_id or "-"),
            f"S{result.last_watched_season:02d}E{result.last_watched_episode:02d}",
            result.message,
        )
    console.print(table)

    summary = SyncEngine.summarize(results)
    ui.section("Summary", icon=Icons.LIBRARY)
    console.print(
        f"  [bold]{summary.total}[/bold] series: "
        f"[sync.success]{summary.success} linked[/sync.success], "
        f"[sync.success_via_search]{summary.success_via_search} via search[/sync.success_via_search], "
        f"[sync.no_identity]{summary.no_identity} not found[/sync.no_identity], "
        f"[sync.error]{summary.error} errors[/sync.error]"
    )
    if summary.error:
        raise typer.Exit(1)


@sync_app.command("resolve")
def sync_resolve(
    series_id: str = typer.Argument(..., help="Jellyfin series id"),
    user: str = typer.Option(..., "--user", "-u", help="Jellyfin username (selects the AniList token)"),
):
    """Show which AniList entry a series resolves to, without syncing."""
    try:
        with get_jellyfin_client() as jellyfin, get_anilist_client(user) as anilist:
            series = jellyfin.get_series(series_id)
            if series is None:
                ui.error(f"Series {series_id} not found in Jellyfin")
                raise typer.Exit(1)
            resolution = get_engine(jellyfin, anilist).resolve(series)
    except JellyfinError as e:
        ui.error("Jellyfin request failed", details=str(e))
        raise typer.Exit(1)

    table = ui.create_table(f"{Icons.LINK} Resolution", show_header=False)
    table.add_column("Field", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    rows = [
        ("Series", series.name),
        ("Premiere", series.premiere_date),
        ("Provider ids", ", ".join(f"{k}={v}" for k, v in series.provider_ids.items()) or None),
        ("Search key", resolution.searched_name),
        ("AniList id", resolution.catalog_id),
        ("Matched by", resolution.matched_by),
        ("Matched title", resolution.matched_title),
    ]
    for field, value in rows:
        table.add_row(field, "[dim]-[/dim]" if value is None else escape(str(value)))
    console.print(table)
    if not resolution.is_found:
        ui.warning("No AniList match")
        raise typer.Exit(1)


@sync_app.command("search")
def sync_search(
    name: str = typer.Argument(..., help="Series name as it appears in Jellyfin"),
    year: int | None = typer.Option(None, "--year", "-y", help="Premiere year for disambiguation"),
    user: str = typer.Option(..., "--user", "-u", help="Jellyfin username (selects the AniList token)"),
):
    """Show AniList candidates for a name and the one a sync would pick."""
    settings = get_settings()
    search_key = normalize_series_name(name)
    console.print(f"  {Icons.SEARCH} Search key: [accent]{search_key}[/accent]" + (f" ({year})" if year else ""))

    try:
        with get_anilist_client(user) as anilist, ui.spinner("Searching AniList..."):
            candidates = anilist.search_media(search_key, year=year, per_page=settings.sync.search_page_size)
    except AniListError as e:
        ui.error("AniList search failed", details=str(e))
        raise typer.Exit(1)

    if not candidates:
        ui.warning("No candidates found")
        raise typer.Exit(1)

    choice = choose_candidate(candidates, search_key, year)
    chosen_id = choice[0].id if choice else None

    table = ui.create_table(f"Candidates for '{search_key}'", columns=["", "ID", "Romaji", "English", "Year", "Format", "Similarity"])
    for candidate in candidates:
        titles = [t for t in (candidate.romaji_title, candidate.english_title) if t]
        similarity = max((fuzz.ratio(search_key.lower(), t.lower()) for t in titles), default=0)
        table.add_row(
            Icons.ARROW_RIGHT if candidate.id == chosen_id else "",
            str(candidate.id),
            candidate.romaji_title or "-",
            candidate.english_title or "-",
            str(candidate.start_year or "-"),
            candidate.format or "-",
            f"{similarity:.0f}%",
        )
    console.print(table)

    if choice:
        ui.info(f"Sync would use [bold]{choice[0].id}[/bold] ({choice[1].replace('_', ' ')})")
