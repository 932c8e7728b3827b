"""Persistence of favorite and watched ports."""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .models import MAX_PORT, MIN_PORT, WatchedPort
from ..config import STATE_FILENAME, data_dir
from ..utils.logging_config import get_logger

logger = get_logger('store')

STATE_VERSION = 1


@dataclass(frozen=True)
class OverlayState:
    """Favorites and watched ports as loaded from disk."""
    favorites: frozenset[int] = frozenset()
    watched: tuple[WatchedPort, ...] = ()


def _valid_port(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MIN_PORT <= value <= MAX_PORT


def _parse_watched(item) -> Optional[WatchedPort]:
    if not isinstance(item, dict):
        return None
    port = item.get("port")
    if not _valid_port(port):
        return None
    notify_on_start = item.get("notify_on_start", True)
    notify_on_stop = item.get("notify_on_stop", True)
    if not isinstance(notify_on_start, bool) or not isinstance(notify_on_stop, bool):
        return None
    watch_id = item.get("id")
    if isinstance(watch_id, str) and watch_id:
        return WatchedPort(port, notify_on_start, notify_on_stop, id=watch_id)
    return WatchedPort(port, notify_on_start, notify_on_stop)


class OverlayStore:
    """Reads and writes the overlay state as JSON."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else data_dir() / STATE_FILENAME
        logger.debug(f"OverlayStore using {self.path}")

    def load(self) -> OverlayState:
        """
        Load favorites and watched ports.

        A missing or unreadable file yields an empty state. Invalid entries
        are skipped, and only the first watched entry per port is kept.
        """
        if not self.path.exists():
            logger.info(f"No saved state at {self.path}")
            return OverlayState()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read state from {self.path}: {e}")
            return OverlayState()

        if not isinstance(payload, dict):
            logger.warning(f"Ignoring state file {self.path}: expected an object")
            return OverlayState()

        favorites = set()
        raw_favorites = payload.get("favorites", [])
        if isinstance(raw_favorites, list):
            for value in raw_favorites:
                if _valid_port(value):
                    favorites.add(value)
                else:
                    logger.debug(f"Skipping invalid favorite {value!r}")

        watched: list[WatchedPort] = []
        seen_ports = set()
        raw_watched = payload.get("watched", [])
        if isinstance(raw_watched, list):
            for item in raw_watched:
                entry = _parse_watched(item)
                if entry is None:
                    logger.debug(f"Skipping invalid watched entry {item!r}")
                    continue
                if entry.port in seen_ports:
                    logger.debug(f"Skipping duplicate watched port {entry.port}")
                    continue
                seen_ports.add(entry.port)
                watched.append(entry)

        logger.info(f"Loaded {len(favorites)} favorite(s) and {len(watched)} watched port(s)")
        return OverlayState(frozenset(favorites), tuple(watched))

    def save(self, favorites: Iterable[int], watched: Iterable[WatchedPort]) -> None:
        """Write the state atomically. Raises OSError if the file cannot be written."""
        payload = {
            "version": STATE_VERSION,
            "favorites": sorted(favorites),
            "watched": [w.to_dict() for w in sorted(watched, key=lambda w: w.port)],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".state-", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug(f"Saved state to {self.path}")
