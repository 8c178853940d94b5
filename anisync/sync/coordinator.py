"""
List-entry progress updates.
"""

import logging
from typing import TYPE_CHECKING

from ..anilist.models import MediaListStatus
from .models import ProgressUpdate

if TYPE_CHECKING:
    from ..anilist import AniListClient

logger = logging.getLogger(__name__)


class NotInListError(Exception):
    """The anime is not in the user's list and auto-add is disabled."""

    def __init__(self, media_id: int, title: str = "") -> None:
        super().__init__(f"'{title or media_id}' is not in the AniList list and auto-add is disabled")
        self.media_id = media_id
        self.title = title


class ProgressSyncCoordinator:
    """
    Set the progress of one AniList list entry, creating it when allowed.

    Each call touches exactly one list entry. Repeating a call with the same
    progress leaves the entry unchanged: an existing entry is always
    updated in place, never re-created.
    """

    def __init__(self, anilist: "AniListClient"):
        self._anilist = anilist

    def _raw_response(self) -> str | None:
        """Raw JSON of the last AniList response, kept for diagnostics."""
        return getattr(self._anilist, "last_response_text", None)

    def apply_progress(self, media_id: int, progress: int, auto_add: bool = True) -> ProgressUpdate:
        """
        Apply progress to the user's list entry for a media.

        Args:
            media_id: AniList media id
            progress: Episodes watched
            auto_add: Create the entry (status CURRENT) when missing

        Returns:
            ProgressUpdate describing the saved entry

        Raises:
            NotInListError: When the entry is missing and auto_add is False
            AniListError: On API failures
        """
        media = self._anilist.get_media(media_id)
        title = media.title.display

        if media.media_list_entry is None:
            if not auto_add:
                logger.info("%s is not in the list; auto-add disabled", title or media_id)
                raise NotInListError(media_id, title)

            entry = self._anilist.create_list_entry(media_id, progress, status=MediaListStatus.CURRENT)
            logger.info("Added %s to the list at episode %d", title or media_id, progress)
            return ProgressUpdate(
                media_id=media_id,
                title=title,
                progress=progress,
                created=True,
                entry=entry,
                raw_response=self._raw_response(),
            )

        entry = self._anilist.update_list_entry(media.media_list_entry.id, progress)
        logger.info("Updated %s to episode %d", title or media_id, progress)
        return ProgressUpdate(
            media_id=media_id,
            title=title,
            progress=progress,
            created=False,
            entry=entry,
            raw_response=self._raw_response(),
        )
