"""
Tests for ProgressSyncCoordinator.
Covers entry creation, updates, the auto-add policy and repeated calls.
"""

import pytest

from anisync.anilist.errors import AniListError
from anisync.anilist.models import CatalogMedia, MediaListStatus, SavedListEntry
from anisync.sync.coordinator import NotInListError, ProgressSyncCoordinator


class TestApplyProgress:
    def test_creates_entry_when_missing(self, fake_anilist):
        coordinator = ProgressSyncCoordinator(fake_anilist)

        update = coordinator.apply_progress(20, 5, auto_add=True)

        assert update.created is True
        assert update.progress == 5
        assert update.title == "Naruto"
        assert fake_anilist.entries[20].progress == 5
        assert fake_anilist.entries[20].status == MediaListStatus.CURRENT
        assert fake_anilist.create_calls == 1
        assert update.raw_response is not None

    def test_updates_existing_entry(self, fake_anilist):
        fake_anilist.create_list_entry(21, 3)
        coordinator = ProgressSyncCoordinator(fake_anilist)

        update = coordinator.apply_progress(21, 7, auto_add=False)

        assert update.created is False
        assert fake_anilist.entries[21].progress == 7
        assert fake_anilist.update_calls == 1
        assert fake_anilist.create_calls == 1

    def test_missing_entry_without_auto_add_raises(self, fake_anilist):
        coordinator = ProgressSyncCoordinator(fake_anilist)

        with pytest.raises(NotInListError) as exc_info:
            coordinator.apply_progress(20, 5, auto_add=False)

        assert exc_info.value.media_id == 20
        assert exc_info.value.title == "Naruto"
        assert fake_anilist.entries == {}

    def test_repeated_apply_is_idempotent(self, fake_anilist):
        coordinator = ProgressSyncCoordinator(fake_anilist)

        first = coordinator.apply_progress(20, 5, auto_add=True)
        second = coordinator.apply_progress(20, 5, auto_add=True)

        assert first.entry.progress == 5
        assert second.entry.progress == 5
        assert second.entry.id == first.entry.id
        assert fake_anilist.create_calls == 1
        assert len(fake_anilist.entries) == 1

    def test_progress_zero_is_written(self, fake_anilist):
        coordinator = ProgressSyncCoordinator(fake_anilist)

        update = coordinator.apply_progress(20, 0)

        assert update.entry.progress == 0

    def test_media_lookup_failure_propagates(self, fake_anilist):
        coordinator = ProgressSyncCoordinator(fake_anilist)

        with pytest.raises(AniListError):
            coordinator.apply_progress(999, 1)

    def test_update_uses_entry_id_not_media_id(self, mock_anilist_client):
        mock_anilist_client.get_media.return_value = CatalogMedia.model_validate(
            {"id": 20, "title": {"romaji": "Naruto"}, "mediaListEntry": {"id": 555, "progress": 2, "status": "CURRENT"}}
        )
        mock_anilist_client.update_list_entry.return_value = SavedListEntry(id=555, media_id=20, progress=4)
        coordinator = ProgressSyncCoordinator(mock_anilist_client)

        coordinator.apply_progress(20, 4)

        mock_anilist_client.update_list_entry.assert_called_once_with(555, 4)
        mock_anilist_client.create_list_entry.assert_not_called()


class TestNotInListError:
    def test_message_names_title(self):
        err = NotInListError(20, "Naruto")
        assert "Naruto" in str(err)
        assert "auto-add" in str(err)

    def test_message_falls_back_to_id(self):
        assert "20" in str(NotInListError(20))
