#!/usr/bin/env python3
"""
CLI for the Jellyfin to AniList sync tool.

Thin launcher so the tool runs from a checkout without installation:

    python cli.py status
    python cli.py sync library --user alice
"""

import sys
from pathlib import Path

# Make the anisync package importable from a checkout
sys.path.insert(0, str(Path(__file__).parent))

from anisync.cli.app import app, main

__all__ = ["app"]

if __name__ == "__main__":
    main()
