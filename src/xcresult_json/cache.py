"""LRU cache for xcresulttool responses, optionally persisted to disk."""

from __future__ import annotations

import json
import logging
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CACHE_SCHEMA_VERSION = 1
DEFAULT_MAX_SIZE = 100


class ResponseCache:
    """Least-recently-used cache of decoded JSON responses.

    Keys are strings such as ``data:<bundle>`` or ``detail:<bundle>:<id>``.
    When a path is given the cache is loaded from and saved to a JSON file;
    otherwise it is in-memory only.

    Thread-safe: uses a lock for concurrent access and auto-saves on write.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, path: str | Path | None = None):
        """Initialize cache.

        Args:
            max_size: Maximum number of entries kept; oldest are evicted first.
            path: Path to cache JSON file. If None, uses in-memory only.

        Raises:
            ValueError: If max_size is less than 1.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.max_size = max_size
        self._path = Path(path) if path else None
        self._entries: OrderedDict[str, Any] = OrderedDict()
        # RLock because set() calls save() while holding it
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        """Load cache from disk if it exists."""
        if not self._path or not self._path.exists():
            return

        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("cache_load_failed: path=%s, error=%s", self._path, e)
            return

        if not isinstance(data, dict) or data.get("schema_version") != CACHE_SCHEMA_VERSION:
            return
        entries = data.get("entries")
        if isinstance(entries, dict):
            for key, value in list(entries.items())[-self.max_size :]:
                self._entries[key] = value

    def save(self) -> None:
        """Save cache to disk (thread-safe)."""
        if not self._path:
            return

        with self._lock:
            payload = {"schema_version": CACHE_SCHEMA_VERSION, "entries": dict(self._entries)}
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text(json.dumps(payload))
            except OSError as e:
                logger.warning("cache_save_failed: path=%s, error=%s", self._path, e)

    def get(self, key: str) -> Any | None:
        """Return the cached value and mark it most recently used, or None."""
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)
            self.save()

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()
            self.save()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
