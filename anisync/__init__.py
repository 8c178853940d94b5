"""
Jellyfin to AniList progress synchronization.

Keeps each Jellyfin user's AniList list in step with what they have watched,
either per series (webhook events) or for a whole library (bulk sync).
"""

__version__ = "0.1.0"
