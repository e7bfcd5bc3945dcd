"""Cache entry model and encoding - Pure functions.

The dashboard keeps exactly one cached result: the last successful feed
fetch. Storage I/O lives in the shell (shell/cache_store.py); this module
only knows how an entry looks, how it is encoded, and whether it is fresh.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from quakemonitor.core.earthquake import Earthquake, SourceRef
from quakemonitor.core.errors import CacheReadError


# Single fixed storage key, not namespaced per query
CACHE_KEY = "quake_monitor_usgs_cache"

# Matches the USGS feed update frequency
CACHE_TTL_MS = 60_000


@dataclass(frozen=True)
class CacheEntry:
    """The last successful fetch.

    Attributes:
        fetched_at: When the fetch completed, epoch milliseconds
        events: Events in the order they were fetched
        sources: Attribution for the events
    """
    fetched_at: int
    events: list[Earthquake] = field(default_factory=list)
    sources: list[SourceRef] = field(default_factory=list)


def is_fresh(entry: CacheEntry, now_ms: int, ttl_ms: int = CACHE_TTL_MS) -> bool:
    """Check whether a cache entry may be served without a network call.

    Pure function.

    Args:
        entry: Cached entry
        now_ms: Current time, epoch milliseconds
        ttl_ms: Validity window in milliseconds

    Returns:
        True if the entry is younger than the TTL
    """
    return now_ms - entry.fetched_at < ttl_ms


def serialize_entry(entry: CacheEntry) -> str:
    """Encode a cache entry as JSON text.

    Pure function.
    """
    record: dict[str, Any] = {
        "timestamp": entry.fetched_at,
        "data": [e.to_dict() for e in entry.events],
        "sources": [s.to_dict() for s in entry.sources],
    }
    return json.dumps(record)


def deserialize_entry(raw: str) -> CacheEntry:
    """Decode JSON text into a cache entry.

    Pure function.

    Args:
        raw: Text previously produced by serialize_entry

    Returns:
        Decoded CacheEntry

    Raises:
        CacheReadError: If the text is not a well-formed cache record
    """
    try:
        record = json.loads(raw)
        if not isinstance(record, dict):
            raise TypeError("cache record is not an object")
        return CacheEntry(
            fetched_at=int(record["timestamp"]),
            events=[Earthquake.from_dict(e) for e in record["data"]],
            sources=[SourceRef.from_dict(s) for s in record.get("sources", [])],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CacheReadError(f"Malformed cache record: {e}") from e
