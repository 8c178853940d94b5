"""
Jellyfin webhook dispatch.

Routes notifications from the Jellyfin webhook plugin to the sync engine.
Receiving the HTTP request is left to the hosting application; it hands the
decoded JSON body to :meth:`WebhookDispatcher.dispatch`.
"""

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError

from .jellyfin.client import JellyfinError
from .sync.engine import SyncEngine
from .sync.ledger import MissingSeriesLedger
from .sync.models import SyncResult

if TYPE_CHECKING:
    from .anilist import AniListClient
    from .config import Settings
    from .jellyfin import JellyfinClient

logger = logging.getLogger(__name__)

EVENT_USER_DATA_SAVED = "UserDataSaved"
EVENT_PLAYBACK_STARTED = "PlaybackStarted"
EVENT_AUTHENTICATION_SUCCESS = "AuthenticationSuccess"

SERIES_EVENTS = (EVENT_USER_DATA_SAVED, EVENT_PLAYBACK_STARTED)


class WebhookPayload(BaseModel):
    """Fields of a Jellyfin webhook notification used for syncing."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    notification_type: str | None = Field(default=None, alias="NotificationType")
    username: str | None = Field(default=None, alias="NotificationUsername")
    user_id: str | None = Field(default=None, alias="UserId")
    series_id: str | None = Field(default=None, alias="SeriesId")
    series_name: str | None = Field(default=None, alias="SeriesName")
    season_number: int | None = Field(default=None, alias="SeasonNumber")
    episode_number: int | None = Field(default=None, alias="EpisodeNumber")
    played: bool | None = Field(default=None, alias="Played")
    save_reason: str | None = Field(default=None, alias="SaveReason")
    device_name: str | None = Field(default=None, alias="DeviceName")
    client: str | None = Field(default=None, alias="Client")


class WebhookOutcome(BaseModel):
    """What a dispatched notification led to."""

    handled: bool
    event: str | None = None
    message: str = ""
    results: list[SyncResult] = Field(default_factory=list)


class WebhookDispatcher:
    """
    Dispatch Jellyfin notifications to per-user sync engines.

    Example:
        dispatcher = WebhookDispatcher(jellyfin, get_anilist_clients(settings), ledger, settings)
        outcome = dispatcher.dispatch(request_json)
    """

    def __init__(
        self,
        jellyfin: "JellyfinClient",
        anilist_clients: dict[str, "AniListClient"],
        ledger: MissingSeriesLedger,
        settings: "Settings",
    ):
        """
        Args:
            jellyfin: Jellyfin client
            anilist_clients: Jellyfin username -> that user's AniList client
            ledger: Shared missing-series ledger
            settings: Application settings (per-user policy, library names)
        """
        self._jellyfin = jellyfin
        self._anilist_clients = anilist_clients
        self._ledger = ledger
        self._settings = settings

    def _engine_for(self, anilist: "AniListClient") -> SyncEngine:
        return SyncEngine.from_settings(self._settings, self._jellyfin, anilist, ledger=self._ledger)

    def dispatch(self, payload: dict[str, Any]) -> WebhookOutcome:
        """
        Handle one webhook notification.

        Args:
            payload: Decoded JSON body from the Jellyfin webhook plugin

        Returns:
            WebhookOutcome; unknown events are acknowledged with ``handled=False``
        """
        try:
            notification = WebhookPayload.model_validate(payload)
        except ValidationError as e:
            logger.warning("Malformed webhook payload: %s", e)
            return WebhookOutcome(handled=False, message=f"Malformed payload: {e.error_count()} invalid field(s)")

        event = notification.notification_type
        if not event:
            logger.warning("Webhook payload has no NotificationType")
            return WebhookOutcome(handled=False, message="No NotificationType in payload")

        logger.info("Webhook received: %s (user=%s)", event, notification.username)

        if event in SERIES_EVENTS:
            return self._handle_series_event(event, notification)
        if event == EVENT_AUTHENTICATION_SUCCESS:
            return self._handle_login(event, notification)

        logger.debug("Ignoring unhandled notification type %s", event)
        return WebhookOutcome(handled=False, event=event, message=f"Unhandled notification type: {event}")

    def _client_for(self, username: str | None) -> "AniListClient | None":
        client = self._anilist_clients.get(username) if username else None
        if client is None and username:
            logger.info("No AniList client configured for user %s", username)
        return client

    @staticmethod
    def _no_client(event: str, username: str | None) -> WebhookOutcome:
        if not username:
            return WebhookOutcome(handled=False, event=event, message="No username in payload")
        return WebhookOutcome(
            handled=False,
            event=event,
            message=f"No AniList token configured for user '{username}'",
        )

    def _handle_series_event(self, event: str, notification: WebhookPayload) -> WebhookOutcome:
        username = notification.username
        client = self._client_for(username)
        if client is None or not username:
            return self._no_client(event, username)
        if not notification.series_id:
            return WebhookOutcome(handled=False, event=event, message="No SeriesId in payload")
        if not notification.user_id:
            return WebhookOutcome(handled=False, event=event, message="No UserId in payload")

        auto_add = self._settings.anilist.auto_add_for_user(username)
        logger.debug(
            "%s for %s S%sE%s played=%s",
            event,
            notification.series_name or notification.series_id,
            notification.season_number,
            notification.episode_number,
            notification.played,
        )

        result = self._engine_for(client).sync_one_series(notification.series_id, notification.user_id, auto_add)
        return WebhookOutcome(handled=True, event=event, message=result.message, results=[result])

    def _handle_login(self, event: str, notification: WebhookPayload) -> WebhookOutcome:
        username = notification.username
        client = self._client_for(username)
        if client is None or not username:
            return self._no_client(event, username)

        if not self._settings.anilist.bulk_update_for_user(username):
            logger.debug("Bulk update disabled for user %s", username)
            return WebhookOutcome(handled=False, event=event, message=f"Bulk update disabled for user '{username}'")
        if not notification.user_id:
            return WebhookOutcome(handled=False, event=event, message="No UserId in payload")

        library_names = self._settings.sync.library_names
        try:
            library = self._jellyfin.find_library(library_names)
        except JellyfinError as e:
            logger.error("Could not list Jellyfin libraries: %s", e)
            return WebhookOutcome(handled=False, event=event, message=f"Could not list libraries: {e}")

        if library is None:
            logger.warning("No anime library found; looked for %s", ", ".join(library_names))
            return WebhookOutcome(handled=False, event=event, message="No anime library found")

        logger.info("Bulk syncing library %s for %s", library.name, username)
        auto_add = self._settings.anilist.auto_add_for_user(username)
        results = self._engine_for(client).sync_library(library.item_id, notification.user_id, auto_add)
        summary = SyncEngine.summarize(results)
        return WebhookOutcome(
            handled=True,
            event=event,
            message=f"Synced {summary.synced}/{summary.total} series from {library.name}",
            results=results,
        )
