"""
Utility modules.
"""

from .logging import configure_logging, log_error, log_success, log_warning
from .ui import Icons, UIHelper, console, ui

__all__ = [
    "console",
    "ui",
    "Icons",
    "UIHelper",
    # Logging
    "configure_logging",
    "log_error",
    "log_success",
    "log_warning",
]
