"""
Main CLI application.

Assembles the subcommands from the anisync.cli modules and adds the global
status command.
"""

import logging
from pathlib import Path

import typer

from anisync.anilist import AniListError
from anisync.cli.common import Icons, console, get_anilist_clients, get_jellyfin_client, get_ledger, ui
from anisync.cli.jellyfin import jellyfin_app
from anisync.cli.missing import missing_app
from anisync.cli.sync import sync_app
from anisync.cli.webhook import webhook_app
from anisync.config import get_settings, reload_settings
from anisync.jellyfin import JellyfinError
from anisync.utils.logging import configure_logging

# Create main app
app = typer.Typer(
    name="anisync",
    help="🎌 Sync Jellyfin anime watch progress to AniList",
    rich_markup_mode="rich",
)

# Register sub-apps
app.add_typer(sync_app, name="sync")
app.add_typer(missing_app, name="missing")
app.add_typer(jellyfin_app, name="jellyfin")
app.add_typer(webhook_app, name="webhook")

logger = logging.getLogger(__name__)


@app.callback()
def main_callback(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Load settings and configure logging."""
    settings = reload_settings(config) if config else get_settings()
    if settings.debug or debug:
        level = "debug"
    elif settings.verbose:
        level = "info"
    else:
        level = "warning"
    configure_logging(level=level, file_path=settings.log_file, rich_tracebacks=False)


@app.command()
def status():
    """Show status of Jellyfin, AniList accounts and the missing-series ledger."""
    settings = get_settings()
    has_errors = False

    # Header
    ui.header("AniSync", subtitle="System Status", icon=Icons.ANIME)

    # Jellyfin Status
    ui.section("Jellyfin", icon=Icons.SERVER)
    console.print(f"  {Icons.LINK} Server: [accent]{settings.jellyfin.host}[/accent]")

    try:
        with ui.spinner("Connecting to Jellyfin..."), get_jellyfin_client() as client:
            libraries = client.get_libraries()
            users = client.get_users()
            anime_library = client.find_library(settings.sync.library_names)
        ui.success(f"{len(libraries)} libraries, {len(users)} users")
        if anime_library:
            ui.success(f"Anime library: [bold]{anime_library.name}[/bold] ({anime_library.item_id})")
        else:
            ui.warning("No anime library found", details=f"Looked for {', '.join(settings.sync.library_names)}")
    except JellyfinError as e:
        # Expected errors - show friendly message only, no traceback
        ui.error("Connection failed", details=str(e))
        logger.debug("Jellyfin connection failed: %s", e)
        has_errors = True

    # AniList Status
    ui.section("AniList", icon=Icons.USERS)
    clients = get_anilist_clients(settings)
    if not clients:
        ui.warning("No user tokens configured", details="Add anilist.user_tokens to config.yaml")
    for username, client in clients.items():
        try:
            with ui.spinner(f"Checking AniList token for {username}..."), client:
                viewer = client.get_viewer()
            policy = []
            if settings.anilist.auto_add_for_user(username):
                policy.append("auto-add")
            if settings.anilist.bulk_update_for_user(username):
                policy.append("bulk on login")
            ui.success(
                f"{Icons.USER} {username} → [bold]{viewer.name}[/bold]",
                details=", ".join(policy) or "update only",
            )
        except AniListError as e:
            ui.error(f"{username}: token check failed", details=str(e))
            has_errors = True
    if settings.anilist.global_token:
        console.print(f"  {Icons.BULLET} Global token configured for users without their own")

    # Ledger Status
    ui.section("Missing-Series Ledger", icon=Icons.LEDGER)
    ledger = get_ledger()
    console.print(f"  {Icons.FILE} File: [accent]{ledger.path}[/accent]")
    entries = ledger.load_all()
    if entries:
        ui.warning(f"{len(entries)} series need attention", details="Run 'anisync missing list'")
    else:
        ui.success("No missing series")

    console.print()

    if has_errors:
        raise typer.Exit(1)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
