"""Feed Client - Imperative Shell.

This module implements the fetch-with-cache-fallback protocol:

1. Fast path: a cache entry younger than the TTL is returned as-is.
2. Otherwise the USGS feed is queried and the cache overwritten.
3. If the network step fails, any cached entry is returned regardless of
   age; only when there is none does the failure reach the caller.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Callable

from quakemonitor.core.cache import CACHE_TTL_MS, CacheEntry, is_fresh
from quakemonitor.core.earthquake import USGS_SOURCE, Earthquake, SourceRef, parse_earthquakes
from quakemonitor.core.errors import FetchError, NetworkError, TotalFailure
from quakemonitor.shell.cache_store import CacheStore
from quakemonitor.shell.usgs_client import USGSClient


logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class FeedResult:
    """Events and attribution returned by a fetch.

    Attributes:
        events: Events in feed order
        sources: Attribution for the events
        from_cache: True when served from the cache slot
        stale: True when served from an expired entry after a failure
        fallback: True when the network step failed and the cache stood in
    """
    events: list[Earthquake]
    sources: list[SourceRef] = field(default_factory=list)
    from_cache: bool = False
    stale: bool = False
    fallback: bool = False


class FeedClient:
    """Fetches dashboard events, using the cache slot when it can.

    This is part of the imperative shell - it handles HTTP and storage I/O.
    """

    def __init__(
        self,
        usgs_client: USGSClient,
        cache_store: CacheStore,
        tz: tzinfo,
        clock: Callable[[], int] = _now_ms,
        ttl_ms: int = CACHE_TTL_MS,
    ) -> None:
        """Initialize feed client.

        Args:
            usgs_client: Client for the USGS API
            cache_store: Single cache slot
            tz: Viewer time zone for display strings
            clock: Returns the current time in epoch milliseconds
            ttl_ms: Cache validity window
        """
        self.usgs_client = usgs_client
        self.cache_store = cache_store
        self.tz = tz
        self.clock = clock
        self.ttl_ms = ttl_ms

    def _fetch_from_network(self) -> FeedResult:
        """Query USGS, map the response and overwrite the cache.

        Raises:
            FetchError: If any step fails
        """
        geojson = self.usgs_client.fetch_dashboard_feed()

        try:
            events = parse_earthquakes(geojson, self.tz)
        except ValueError as e:
            raise NetworkError(f"Unusable USGS response: {e}") from e

        sources = [USGS_SOURCE]

        try:
            self.cache_store.write(CacheEntry(
                fetched_at=self.clock(),
                events=events,
                sources=sources,
            ))
        except OSError as e:
            raise FetchError(f"Failed to update cache: {e}") from e

        return FeedResult(events=events, sources=sources)

    def fetch(self, force_refresh: bool = False) -> FeedResult:
        """Fetch dashboard events.

        This method performs HTTP and storage I/O.

        Args:
            force_refresh: Skip the fast path and always query the network

        Returns:
            FeedResult from the cache fast path, the network, or a stale
            cache entry

        Raises:
            TotalFailure: If the network failed and nothing is cached
        """
        if not force_refresh:
            cached = self.cache_store.read()
            if cached is not None and is_fresh(cached, self.clock(), self.ttl_ms):
                logger.info("Serving %d earthquakes from cache", len(cached.events))
                return FeedResult(
                    events=list(cached.events),
                    sources=list(cached.sources),
                    from_cache=True,
                )

        try:
            return self._fetch_from_network()
        except FetchError as e:
            logger.error("USGS fetch error: %s", e)

            cached = self.cache_store.read()
            if cached is not None:
                logger.warning(
                    "Falling back to cached data from %d (%d earthquakes)",
                    cached.fetched_at,
                    len(cached.events),
                )
                return FeedResult(
                    events=list(cached.events),
                    sources=list(cached.sources),
                    from_cache=True,
                    stale=not is_fresh(cached, self.clock(), self.ttl_ms),
                    fallback=True,
                )

            raise TotalFailure(f"No USGS data and no cache available: {e}") from e
