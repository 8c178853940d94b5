"""
Rich UI utilities for console output.

Provides consistent feedback across the CLI with spinners, progress bars,
panels, tables, and styled messages.

Usage:
    from anisync.utils.ui import console, ui

    ui.success("Progress synced")
    ui.error("AniList request failed", details="429 Too Many Requests")

    with ui.spinner("Fetching libraries..."):
        libraries = client.get_libraries()

    table = ui.create_table("Series", columns=["Name", "Status"])
    table.add_row("Naruto", "success")
    console.print(table)
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from rich.box import DOUBLE, ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.rule import Rule
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

# =============================================================================
# Custom Theme
# =============================================================================

ANISYNC_THEME = Theme(
    {
        # Status colors
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "debug": "dim",
        "muted": "dim white",
        # UI elements
        "header": "bold magenta",
        "subheader": "bold blue",
        "accent": "bold cyan",
        "highlight": "bold yellow",
        # Sync outcomes
        "sync.success": "green",
        "sync.success_via_search": "cyan",
        "sync.no_identity": "yellow",
        "sync.error": "bold red",
        # Data types
        "anilist_id": "cyan",
        "title": "bold white",
        "episode": "green",
    }
)

# =============================================================================
# Global Console
# =============================================================================

console = Console(theme=ANISYNC_THEME, highlight=True, emoji=True)

# =============================================================================
# Icons & Symbols
# =============================================================================


class Icons:
    """Unicode icons for consistent visual feedback."""

    # Status
    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "⚠"
    INFO = "ℹ"
    PENDING = "○"

    ARROW_RIGHT = "→"
    BULLET = "•"

    # Media
    TV = "📺"
    ANIME = "🎌"
    LIBRARY = "📚"

    # System
    FILE = "📄"
    LINK = "🔗"
    SERVER = "🖥️"
    LEDGER = "📝"

    # People
    USER = "👤"
    USERS = "👥"

    # Actions
    SEARCH = "🔍"
    SYNC = "🔄"
    WEBHOOK = "📩"


# =============================================================================
# UI Helper Class
# =============================================================================


class UIHelper:
    """Central UI helper for consistent visual output."""

    def __init__(self, console: Console):
        self.console = console
        self.icons = Icons

    # -------------------------------------------------------------------------
    # Status Messages
    # -------------------------------------------------------------------------

    def _status(self, prefix: str, style: str, message: str, details: str | None) -> None:
        text = Text(f"{prefix} ", style=style)
        text.append_text(Text.from_markup(message))
        if details:
            text.append(f"\n   {details}", style="muted")
        self.console.print(text)

    def success(self, message: str, details: str | None = None, prefix: str = Icons.SUCCESS) -> None:
        """Print a success message."""
        self._status(prefix, "success", message, details)

    def error(self, message: str, details: str | None = None, prefix: str = Icons.ERROR) -> None:
        """Print an error message; the message itself is styled red too."""
        self._status(prefix, "error", f"[error]{message}[/error]", details)

    def warning(self, message: str, details: str | None = None, prefix: str = Icons.WARNING) -> None:
        """Print a warning message."""
        self._status(prefix, "warning", message, details)

    def info(self, message: str, details: str | None = None, prefix: str = Icons.INFO) -> None:
        """Print an info message."""
        self._status(prefix, "info", message, details)

    def muted(self, message: str) -> None:
        """Print a muted/dim message."""
        self.console.print(f"[muted]{message}[/muted]")

    # -------------------------------------------------------------------------
    # Headers & Sections
    # -------------------------------------------------------------------------

    def header(
        self,
        title: str,
        subtitle: str | None = None,
        icon: str | None = None,
        style: str = "header",
    ) -> None:
        """Print a styled header banner."""
        icon_str = f"{icon} " if icon else ""

        content = Text()
        content.append(f"{icon_str}{title}", style=style)
        if subtitle:
            content.append(f"\n{subtitle}", style="muted")

        self.console.print()
        self.console.print(Panel(content, box=DOUBLE, border_style=style, padding=(1, 2)))
        self.console.print()

    def section(self, title: str, icon: str | None = None, style: str = "subheader") -> None:
        """Print a section header with rule."""
        icon_str = f"{icon} " if icon else ""
        self.console.print()
        self.console.print(Rule(f"{icon_str}{title}", style=style, align="left"))
        self.console.print()

    # -------------------------------------------------------------------------
    # Progress & Spinners
    # -------------------------------------------------------------------------

    @contextmanager
    def spinner(
        self,
        message: str,
        spinner_name: str = "dots",
        style: str = "info",
    ) -> Generator[Status, None, None]:
        """Context manager for spinner with status updates."""
        with self.console.status(f"[{style}]{message}[/{style}]", spinner=spinner_name) as status:
            yield status

    def progress(
        self,
        *columns: ProgressColumn,
        transient: bool = False,
    ) -> Progress:
        """Create a progress bar with sensible defaults."""
        if not columns:
            columns = (
                SpinnerColumn(spinner_name="dots2", style="info"),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(bar_width=40, style="info", complete_style="success", finished_style="success"),
                MofNCompleteColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
            )
        return Progress(*columns, console=self.console, transient=transient)

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def create_table(
        self,
        title: str | None = None,
        columns: list[str] | None = None,
        show_header: bool = True,
        box_style: Any = ROUNDED,
        header_style: str = "bold cyan",
        border_style: str = "dim",
    ) -> Table:
        """Create a styled table."""
        table = Table(
            title=title,
            show_header=show_header,
            box=box_style,
            header_style=header_style,
            border_style=border_style,
        )

        if columns:
            for col in columns:
                table.add_column(col)

        return table

    # -------------------------------------------------------------------------
    # Specialized Displays
    # -------------------------------------------------------------------------

    def sync_status_badge(self, status: str) -> Text:
        """Create a colored badge for a sync status value."""
        labels = {
            "success": f"{Icons.SUCCESS} linked",
            "success_via_search": f"{Icons.SEARCH} via search",
            "no_identity": f"{Icons.WARNING} not found",
            "error": f"{Icons.ERROR} error",
        }
        return Text(labels.get(status, status), style=f"sync.{status}")


# =============================================================================
# Singleton UI Instance
# =============================================================================

ui = UIHelper(console)

__all__ = [
    "console",
    "ui",
    "Icons",
    "UIHelper",
    "ANISYNC_THEME",
]
