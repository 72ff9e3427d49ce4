"""Client-side storage and the per-category data cache."""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

WEATHER = "weather"
SPORTS = "sports"
CONCERTS = "concerts"

CATEGORY_TTLS: dict[str, float] = {
    WEATHER: 30 * 60,
    SPORTS: 30 * 60,
    CONCERTS: 60 * 60,
}

# Cleared on every page reload; preference sections are never in this list.
RELOAD_CATEGORIES = (WEATHER, SPORTS, CONCERTS)
SESSION_MARKER = "last_page_load"
CACHE_KEY_PREFIX = "cached_"


class LocalStorage:
    """Persistent key/value store (the browser-local tier).

    Backed by one JSON file when ``path`` is given, otherwise in memory only.
    """

    def __init__(self, path: Path | str | None = None):
        self._path = Path(path) if path else None
        self._data: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Local storage at %s is unreadable, starting empty", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SessionStorage:
    """Per-tab key/value store; lives only as long as the process."""

    def __init__(self):
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    timestamp: float


class DataCache:
    """Category -> (value, timestamp) cache with per-category TTLs.

    Entries are written through to local storage and loaded lazily on
    first access; stale persisted entries are dropped when loaded.
    """

    def __init__(
        self,
        storage: LocalStorage,
        ttls: Optional[dict[str, float]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage
        self._ttls = dict(ttls or CATEGORY_TTLS)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._loaded: set[str] = set()

    def ttl(self, category: str) -> float:
        return self._ttls.get(category, CATEGORY_TTLS[WEATHER])

    def _storage_key(self, category: str) -> str:
        return f"{CACHE_KEY_PREFIX}{category}"

    def _load(self, category: str) -> None:
        if category in self._loaded:
            return
        self._loaded.add(category)
        raw = self._storage.get(self._storage_key(category))
        if not isinstance(raw, dict) or "timestamp" not in raw:
            return
        entry = CacheEntry(raw.get("value"), float(raw["timestamp"]))
        if self._is_entry_fresh(category, entry):
            self._entries[category] = entry
        else:
            self._storage.remove(self._storage_key(category))

    def _is_entry_fresh(self, category: str, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < self.ttl(category)

    def entry(self, category: str) -> Optional[CacheEntry]:
        self._load(category)
        return self._entries.get(category)

    def is_fresh(self, category: str) -> bool:
        entry = self.entry(category)
        return entry is not None and self._is_entry_fresh(category, entry)

    def get(self, category: str) -> Any:
        """The cached value if present and fresh, else None."""
        if not self.is_fresh(category):
            return None
        return self._entries[category].value

    def set(self, category: str, value: Any) -> None:
        """Replace a whole category."""
        entry = CacheEntry(value, self._clock())
        self._loaded.add(category)
        self._entries[category] = entry
        self._storage.set(
            self._storage_key(category), {"value": value, "timestamp": entry.timestamp}
        )

    def invalidate(self, category: str) -> None:
        self._loaded.add(category)
        self._entries.pop(category, None)
        self._storage.remove(self._storage_key(category))


def initialize_session(
    session: SessionStorage,
    cache: DataCache,
    clock: Callable[[], float] = time.time,
) -> bool:
    """Mark this session as loaded, clearing data caches on a reload.

    Returns True when the call was a reload (the marker already existed).
    """
    is_reload = session.get(SESSION_MARKER) is not None
    if is_reload:
        logger.info("Reload detected, discarding cached %s", ", ".join(RELOAD_CATEGORIES))
        for category in RELOAD_CATEGORIES:
            cache.invalidate(category)
    session.set(SESSION_MARKER, clock())
    return is_reload
