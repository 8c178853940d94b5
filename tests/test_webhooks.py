"""
Tests for webhook dispatch.
Covers event routing, per-user policy and rejected payloads.
"""

import pytest

from anisync.config import Settings
from anisync.jellyfin.client import JellyfinConnectionError
from anisync.jellyfin.models import Library
from anisync.sync.models import SyncStatus
from anisync.webhooks import (
    EVENT_AUTHENTICATION_SUCCESS,
    EVENT_PLAYBACK_STARTED,
    EVENT_USER_DATA_SAVED,
    WebhookDispatcher,
)
from conftest import make_episode, make_series


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings()
    settings.sync.pacing_seconds = 0
    settings.paths.missing_series_file = tmp_path / "missing.json"
    settings.anilist.user_auto_add = {"bob": False}
    settings.anilist.user_bulk_update = {"alice": True}
    return settings


@pytest.fixture
def dispatcher(mock_jellyfin_client, fake_anilist, ledger, settings) -> WebhookDispatcher:
    return WebhookDispatcher(
        mock_jellyfin_client,
        {"alice": fake_anilist, "bob": fake_anilist},
        ledger,
        settings,
    )


def _series_event(event=EVENT_USER_DATA_SAVED, username="alice", **overrides):
    payload = {
        "NotificationType": event,
        "NotificationUsername": username,
        "UserId": "user-1",
        "SeriesId": "s1",
        "SeriesName": "Naruto",
        "SeasonNumber": 1,
        "EpisodeNumber": 3,
        "Played": True,
    }
    payload.update(overrides)
    return payload


# -----------------------------------------------------------------------------
# Series events
# -----------------------------------------------------------------------------
class TestSeriesEvents:
    @pytest.mark.parametrize("event", [EVENT_USER_DATA_SAVED, EVENT_PLAYBACK_STARTED])
    def test_syncs_series(self, event, dispatcher, mock_jellyfin_client, fake_anilist):
        mock_jellyfin_client.get_series.return_value = make_series("s1", AniList="20")
        mock_jellyfin_client.get_episodes_progress.return_value = [make_episode(1, 3, True)]

        outcome = dispatcher.dispatch(_series_event(event))

        assert outcome.handled
        assert outcome.event == event
        assert outcome.results[0].status == SyncStatus.SUCCESS
        assert fake_anilist.entries[20].progress == 3
        mock_jellyfin_client.get_episodes_progress.assert_called_once_with("s1", "user-1")

    def test_unplayed_event_still_syncs(self, dispatcher, mock_jellyfin_client):
        mock_jellyfin_client.get_series.return_value = make_series("s1", AniList="20")

        outcome = dispatcher.dispatch(_series_event(Played=False))

        assert outcome.handled
        assert outcome.results[0].last_watched_episode == 0

    def test_auto_add_policy_per_user(self, dispatcher, mock_jellyfin_client, fake_anilist):
        mock_jellyfin_client.get_series.return_value = make_series("s1", AniList="20")

        outcome = dispatcher.dispatch(_series_event(username="bob"))

        assert outcome.results[0].status == SyncStatus.ERROR
        assert fake_anilist.create_calls == 0

    def test_superscript_provider_id_still_handled(self, dispatcher, mock_jellyfin_client, fake_anilist):
        mock_jellyfin_client.get_series.return_value = make_series("s1", "Unknown Show", AniList="²")

        outcome = dispatcher.dispatch(_series_event())

        assert outcome.handled
        assert outcome.results[0].status == SyncStatus.NO_IDENTITY
        assert fake_anilist.entries == {}

    def test_no_username_rejected(self, dispatcher, mock_jellyfin_client):
        outcome = dispatcher.dispatch(_series_event(username=""))

        assert not outcome.handled
        assert outcome.message == "No username in payload"
        mock_jellyfin_client.get_series.assert_not_called()

    def test_unknown_user_rejected(self, dispatcher, mock_jellyfin_client):
        outcome = dispatcher.dispatch(_series_event(username="mallory"))

        assert not outcome.handled
        assert "mallory" in outcome.message
        mock_jellyfin_client.get_series.assert_not_called()

    @pytest.mark.parametrize("missing", ["SeriesId", "UserId", "NotificationUsername"])
    def test_missing_fields_rejected(self, missing, dispatcher, mock_jellyfin_client):
        payload = _series_event()
        del payload[missing]

        outcome = dispatcher.dispatch(payload)

        assert not outcome.handled
        mock_jellyfin_client.get_series.assert_not_called()


# -----------------------------------------------------------------------------
# Login (bulk) events
# -----------------------------------------------------------------------------
class TestLoginEvent:
    def _login(self, username="alice"):
        return {"NotificationType": EVENT_AUTHENTICATION_SUCCESS, "NotificationUsername": username, "UserId": "user-1"}

    def test_bulk_sync_when_enabled(self, dispatcher, mock_jellyfin_client, fake_anilist):
        mock_jellyfin_client.find_library.return_value = Library(name="Animes", item_id="lib-1")
        mock_jellyfin_client.get_library_series.return_value = [
            make_series("a", "Naruto", AniList="20"),
            make_series("b", "One Piece", AniList="21"),
        ]

        outcome = dispatcher.dispatch(self._login())

        assert outcome.handled
        assert len(outcome.results) == 2
        assert "2/2" in outcome.message
        mock_jellyfin_client.find_library.assert_called_once_with(["Animes", "Anime"])
        mock_jellyfin_client.get_library_series.assert_called_once_with("lib-1")

    def test_bulk_disabled_by_default(self, dispatcher, mock_jellyfin_client):
        outcome = dispatcher.dispatch(self._login(username="bob"))

        assert not outcome.handled
        assert "disabled" in outcome.message
        mock_jellyfin_client.find_library.assert_not_called()

    def test_no_library(self, dispatcher, mock_jellyfin_client):
        mock_jellyfin_client.find_library.return_value = None

        outcome = dispatcher.dispatch(self._login())

        assert not outcome.handled
        assert "library" in outcome.message

    def test_library_lookup_failure(self, dispatcher, mock_jellyfin_client):
        mock_jellyfin_client.find_library.side_effect = JellyfinConnectionError("down")

        outcome = dispatcher.dispatch(self._login())

        assert not outcome.handled


# -----------------------------------------------------------------------------
# Malformed and unknown payloads
# -----------------------------------------------------------------------------
class TestRejectedPayloads:
    def test_unknown_event(self, dispatcher):
        outcome = dispatcher.dispatch({"NotificationType": "ItemAdded", "NotificationUsername": "alice"})

        assert not outcome.handled
        assert outcome.event == "ItemAdded"

    def test_no_notification_type(self, dispatcher):
        assert not dispatcher.dispatch({"NotificationUsername": "alice"}).handled

    def test_malformed_field(self, dispatcher):
        outcome = dispatcher.dispatch(_series_event(SeasonNumber="not a number"))

        assert not outcome.handled
        assert "Malformed" in outcome.message
