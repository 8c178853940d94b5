"""
Rich-enhanced logging configuration.

Provides centralized logging setup with Rich console output and an optional
plain-text file handler, plus helpers that prefix messages with status icons.

.. warning::
    By default, ``configure_logging()`` installs a **global traceback handler**
    via Rich. Set ``rich_tracebacks=False`` when embedding the sync engine in
    another application.

Usage:
    from anisync.utils.logging import configure_logging, log_success

    configure_logging(level="info", file_path="data/anisync.log")

    log_success("Synced %s", "Naruto")
"""

import logging
import sys
from pathlib import Path
from typing import Any, Literal

from rich.errors import MarkupError
from rich.logging import RichHandler
from rich.text import Text
from rich.traceback import install as install_rich_traceback

from anisync.utils.ui import console as rich_console

# All package logs live under this prefix
MODULE_LOGGER_NAME = "anisync"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class PlainFormatter(logging.Formatter):
    """Formatter that drops Rich markup so plain handlers write readable text."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        try:
            record.message = Text.from_markup(record.message).plain
        except MarkupError:
            # Unbalanced brackets in a series name; keep the text as logged
            pass
        return super().formatMessage(record)


def _get_log_level(level: LogLevel | int) -> int:
    """Convert level string to logging constant."""
    if isinstance(level, int):
        return level

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return level_map.get(level.lower(), logging.INFO)


def configure_logging(
    level: LogLevel | int = "info",
    console: bool = True,
    file_path: str | Path | None = None,
    file_log_level: LogLevel | int | None = None,
    format_string: str | None = None,
    use_rich: bool = True,
    rich_tracebacks: bool = True,
    show_path: bool = False,
    show_time: bool = True,
) -> logging.Logger:
    """
    Configure logging for the ``anisync`` package.

    Args:
        level: Log level for console output
        console: Whether to enable console logging
        file_path: Optional file path for file logging
        file_log_level: Log level for file output (defaults to level)
        format_string: Custom format string for plain handlers
        use_rich: Use a RichHandler for console output
        rich_tracebacks: Install Rich's process-wide exception hook
        show_path: Show source path in console logs
        show_time: Show timestamp in console logs

    Returns:
        The configured package logger
    """
    log_level = _get_log_level(level)
    file_level = _get_log_level(file_log_level) if file_log_level else log_level

    if use_rich and rich_tracebacks:
        install_rich_traceback(console=rich_console, show_locals=False, width=rich_console.width, word_wrap=True)

    logger = logging.getLogger(MODULE_LOGGER_NAME)
    logger.setLevel(min(log_level, file_level) if file_path else log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    if console:
        console_handler: logging.Handler
        if use_rich:
            console_handler = RichHandler(
                level=log_level,
                console=rich_console,
                show_time=show_time,
                show_path=show_path,
                rich_tracebacks=rich_tracebacks,
                markup=True,
                log_time_format="[%X]",
                keywords=["AniList", "Jellyfin", "library", "series", "ledger"],
            )
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(PlainFormatter(format_string or DEFAULT_FORMAT))
        logger.addHandler(console_handler)

    # File handler - always plain formatting for parseable logs
    if file_path:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(PlainFormatter(format_string or DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    return logger


# =============================================================================
# Icon-prefixed helpers
# =============================================================================


def _resolve(logger: logging.Logger | None) -> logging.Logger:
    return logger if logger is not None else logging.getLogger(MODULE_LOGGER_NAME)


def log_success(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log a success message with green checkmark."""
    _resolve(logger).info("[green]✓[/green] " + message, *args)


def log_error(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log an error message with red X."""
    _resolve(logger).error("[red]✗[/red] " + message, *args)


def log_warning(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log a warning message with yellow warning sign."""
    _resolve(logger).warning("[yellow]⚠[/yellow] " + message, *args)


__all__ = [
    "configure_logging",
    "log_error",
    "log_success",
    "log_warning",
    "PlainFormatter",
]
