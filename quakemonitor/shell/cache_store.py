"""Cache Store - Imperative Shell.

This module persists the single cached feed result. Storage is a plain
string key/value interface so the slot can live in a file, an embedded KV
store, or memory; encoding and freshness rules are in core/cache.py.

All I/O is contained here.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from quakemonitor.core.cache import CACHE_KEY, CacheEntry, deserialize_entry, serialize_entry
from quakemonitor.core.errors import CacheReadError


logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable string storage addressed by key."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class FileKeyValueStore:
    """Key/value store keeping one file per key in a directory.

    Writes go to a temporary file that replaces the target in one step, so
    a reader never sees a partially written value.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        """Read the value stored under a key.

        Raises:
            CacheReadError: If the file exists but cannot be read
        """
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(f"Cannot read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryKeyValueStore:
    """Key/value store held in memory; nothing survives a restart."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class CacheStore:
    """The dashboard's single cache slot.

    This is part of the imperative shell - it handles storage I/O.
    """

    def __init__(self, store: KeyValueStore, key: str = CACHE_KEY) -> None:
        """Initialize cache store.

        Args:
            store: Backing key/value storage
            key: Fixed key of the slot
        """
        self.store = store
        self.key = key

    def read(self) -> CacheEntry | None:
        """Read the cached entry.

        A corrupt or unreadable entry is logged and reported as a miss;
        this method never raises a cache read error.

        Returns:
            The cached entry, or None on a miss
        """
        try:
            raw = self.store.get(self.key)
            if raw is None:
                return None
            return deserialize_entry(raw)
        except CacheReadError as e:
            logger.warning("Cache lookup failed: %s", e)
            return None

    def write(self, entry: CacheEntry) -> None:
        """Overwrite the slot with a new entry."""
        self.store.set(self.key, serialize_entry(entry))
        logger.info(
            "Cached %d earthquakes fetched at %d",
            len(entry.events),
            entry.fetched_at,
        )
