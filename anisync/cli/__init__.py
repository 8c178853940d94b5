"""
CLI module for the Jellyfin to AniList sync tool.

This module contains subcommands organized by domain:
- sync: Sync series or whole libraries to AniList
- missing: Review the missing-series ledger
- jellyfin: Inspect Jellyfin libraries and watch state
- webhook: Replay saved webhook payloads
"""

from anisync.cli.common import (
    console,
    get_anilist_client,
    get_anilist_clients,
    get_engine,
    get_jellyfin_client,
    get_ledger,
    ui,
)

__all__ = [
    "console",
    "get_anilist_client",
    "get_anilist_clients",
    "get_engine",
    "get_jellyfin_client",
    "get_ledger",
    "ui",
]
