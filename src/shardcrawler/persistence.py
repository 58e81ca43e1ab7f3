from __future__ import annotations

import json
import logging
from typing import Dict, Optional, Protocol

from .game.world import RunStats
from .settings import Settings

log = logging.getLogger(__name__)

BEST_RUN_KEY = "shardcrawler.best_run"
SETTINGS_KEY = "shardcrawler.settings"


class RecordStore(Protocol):
    """What the session needs from durable storage. Records are opaque JSON blobs to the store."""

    def load_best_run(self) -> Optional[RunStats]: ...

    def save_best_run(self, stats: RunStats) -> None: ...

    def load_settings(self) -> Settings: ...

    def save_settings(self, settings: Settings) -> None: ...


class MemoryRecordStore:
    """Key-value store over an in-memory dict of JSON strings.

    Unreadable blobs are logged and treated as absent, like a corrupt browser store would be.
    """

    def __init__(self, blobs: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(blobs or {})

    def load_best_run(self) -> Optional[RunStats]:
        raw = self.blobs.get(BEST_RUN_KEY)
        if not raw:
            return None
        try:
            return RunStats.from_json(raw)
        except ValueError:
            log.exception("Failed to load best run; ignoring stored record")
            return None

    def save_best_run(self, stats: RunStats) -> None:
        self.blobs[BEST_RUN_KEY] = stats.to_json()
        log.info("Best run saved: depth=%d shards=%d victory=%s", stats.depth_reached, stats.shards_collected, stats.victory)

    def load_settings(self) -> Settings:
        raw = self.blobs.get(SETTINGS_KEY)
        if not raw:
            return Settings()
        try:
            return Settings.from_dict(json.loads(raw))
        except (AttributeError, TypeError, ValueError):
            log.exception("Failed to restore settings; using defaults")
            return Settings()

    def save_settings(self, settings: Settings) -> None:
        self.blobs[SETTINGS_KEY] = json.dumps(settings.to_dict(), sort_keys=True)
