"""
Missing-series ledger.

File-backed record of series that could not be matched to AniList, kept
for operator review. Entries are keyed by Jellyfin id and never duplicated.
The ledger is diagnostics only: write failures are logged, not raised.
"""

import logging
import os
import threading
from pathlib import Path

import orjson
from pydantic import ValidationError

from ..jellyfin.models import SeriesRecord
from .models import MissingSeriesEntry

logger = logging.getLogger(__name__)

REASON_NO_PROVIDER_ID = "No AniList provider ID and search failed"
REASON_SEARCH_FAILED = "AniList search by name failed"

# Alternate ids copied from the series for manual lookup
ALTERNATE_PROVIDERS = ("Tmdb", "Imdb", "Tvdb")


def entry_for_series(
    series: SeriesRecord,
    searched_name: str | None,
    provider_name: str = "AniList",
) -> MissingSeriesEntry:
    """
    Build a ledger entry for an unresolved series.

    Args:
        series: The series that failed resolution
        searched_name: Normalized name used for the search
        provider_name: Provider id key holding the AniList id

    Returns:
        A new MissingSeriesEntry stamped with the current time
    """
    alternate_ids = {}
    for provider in ALTERNATE_PROVIDERS:
        value = series.provider_id(provider)
        if value:
            alternate_ids[provider] = value

    reason = REASON_SEARCH_FAILED if series.provider_id(provider_name) else REASON_NO_PROVIDER_ID

    return MissingSeriesEntry(
        media_server_id=series.id,
        name=series.name,
        premiere_date=series.premiere_date,
        alternate_provider_ids=alternate_ids,
        searched_name=searched_name or "",
        reason=reason,
    )


class MissingSeriesLedger:
    """
    Deduplicated JSON ledger of unresolved series.

    Load-check-append-save runs under a lock so concurrent syncs cannot
    record the same series twice.

    Example:
        ledger = MissingSeriesLedger(Path("data/missing_anilist_series.json"))
        ledger.add(entry)
        for entry in ledger.load_all():
            print(entry.name, entry.reason)
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> list[MissingSeriesEntry]:
        """Read the file; a missing or unreadable file reads as empty."""
        if not self.path.exists():
            return []
        try:
            raw = orjson.loads(self.path.read_bytes())
        except (orjson.JSONDecodeError, OSError) as e:
            logger.warning("Could not read missing-series ledger %s: %s", self.path, e)
            return []

        if not isinstance(raw, list):
            logger.warning("Missing-series ledger %s is not a JSON array; ignoring it", self.path)
            return []

        entries = []
        for item in raw:
            try:
                entries.append(MissingSeriesEntry.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed ledger record: %s", e)
        return entries

    def _write(self, entries: list[MissingSeriesEntry]) -> bool:
        """Write all entries atomically (temp file then replace)."""
        payload = [entry.model_dump(mode="json", by_alias=True) for entry in entries]
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Could not write missing-series ledger %s: %s", self.path, e)
            tmp_path.unlink(missing_ok=True)
            return False
        return True

    def load_all(self) -> list[MissingSeriesEntry]:
        """Get every entry in insertion order."""
        with self._lock:
            return self._read()

    def contains(self, media_server_id: str) -> bool:
        """Check whether a series is already recorded."""
        return any(entry.media_server_id == media_server_id for entry in self.load_all())

    def add(self, entry: MissingSeriesEntry) -> bool:
        """
        Record a series unless it is already present.

        Returns:
            True if the entry was appended and saved, False if it was a
            duplicate or could not be saved
        """
        with self._lock:
            entries = self._read()
            if any(existing.media_server_id == entry.media_server_id for existing in entries):
                logger.debug("Series %s already in missing-series ledger", entry.media_server_id)
                return False

            entries.append(entry)
            if not self._write(entries):
                return False

        logger.info("Recorded unresolved series '%s' in missing-series ledger", entry.name)
        return True

    def remove(self, media_server_id: str) -> bool:
        """
        Delete an entry (operator action).

        Returns:
            True if an entry was removed
        """
        with self._lock:
            entries = self._read()
            kept = [entry for entry in entries if entry.media_server_id != media_server_id]
            if len(kept) == len(entries):
                return False
            return self._write(kept)
