"""
Webhook CLI commands.

- replay: Feed a saved Jellyfin webhook payload to the dispatcher
"""

import logging
from pathlib import Path

import orjson
import typer

from anisync.cli.common import (
    Icons,
    console,
    get_anilist_clients,
    get_jellyfin_client,
    get_ledger,
    ui,
)
from anisync.config import get_settings
from anisync.webhooks import WebhookDispatcher

logger = logging.getLogger(__name__)

# Create Webhook sub-app
webhook_app = typer.Typer(help="📩 Jellyfin webhook handling")


@webhook_app.command("replay")
def webhook_replay(
    payload_file: Path = typer.Argument(..., help="JSON file holding a Jellyfin webhook payload"),
):
    """Dispatch a saved webhook payload as if Jellyfin had just sent it."""
    try:
        payload = orjson.loads(payload_file.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        ui.error(f"Could not read {payload_file}", details=str(e))
        raise typer.Exit(1)

    if not isinstance(payload, dict):
        ui.error("Webhook payload must be a JSON object")
        raise typer.Exit(1)

    settings = get_settings()
    clients = get_anilist_clients(settings)
    try:
        with get_jellyfin_client() as jellyfin:
            dispatcher = WebhookDispatcher(jellyfin, clients, get_ledger(), settings)
            with ui.spinner(f"Dispatching {payload.get('NotificationType', 'webhook')}..."):
                outcome = dispatcher.dispatch(payload)
    finally:
        for client in clients.values():
            client.close()

    if not outcome.handled:
        ui.warning(f"{Icons.WEBHOOK} Not handled: {outcome.message}")
        return

    ui.success(f"{outcome.event}: {outcome.message}")
    if outcome.results:
        table = ui.create_table(columns=["Series", "Status", "AniList", "Message"])
        for result in outcome.results:
            table.add_row(
                result.series_name or result.series_id,
                ui.sync_status_badge(result.status.value),
                str(result.catalog_id or "-"),
                result.message,
            )
        console.print(table)
