"""
Missing-series ledger CLI commands.

- list: Show series that could not be matched to AniList
- remove: Drop an entry once it has been fixed in Jellyfin
"""

import logging

import orjson
import typer

from anisync.cli.common import Icons, console, get_ledger, ui

logger = logging.getLogger(__name__)

# Create Missing sub-app
missing_app = typer.Typer(help="📝 Review series missing from AniList")


@missing_app.command("list")
def missing_list(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
):
    """List series recorded as missing from AniList."""
    ledger = get_ledger()
    entries = ledger.load_all()

    if format == "json":
        payload = [entry.model_dump(mode="json", by_alias=True) for entry in entries]
        print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())
        return

    if not entries:
        ui.success("No missing series recorded", details=str(ledger.path))
        return

    table = ui.create_table(
        f"{Icons.LEDGER} Missing Series ({len(entries)})",
        columns=["Jellyfin ID", "Name", "Premiere", "Searched As", "Other IDs", "First Seen", "Reason"],
    )
    for entry in entries:
        table.add_row(
            entry.media_server_id,
            entry.name,
            (entry.premiere_date or "-")[:10],
            entry.searched_name or "-",
            ", ".join(f"{k}={v}" for k, v in entry.alternate_provider_ids.items()) or "-",
            entry.first_seen_at.strftime("%Y-%m-%d %H:%M"),
            entry.reason,
        )
    console.print(table)
    ui.muted(f"Ledger: {ledger.path}")


@missing_app.command("remove")
def missing_remove(
    media_server_id: str = typer.Argument(..., help="Jellyfin series id to remove"),
):
    """Remove a series from the missing-series ledger."""
    ledger = get_ledger()
    if not ledger.remove(media_server_id):
        ui.error(f"No ledger entry for {media_server_id}")
        raise typer.Exit(1)
    ui.success(f"Removed {media_server_id} from the missing-series ledger")
