"""Tests for the cache-first feed client.

The USGS client is mocked, except where `responses` serves ill-shaped
bodies to a real one. The cache slot lives in memory.
"""

from datetime import timezone
from unittest.mock import Mock

import pytest
import responses

from quakemonitor.core.cache import CACHE_KEY, CacheEntry
from quakemonitor.core.config import DEFAULT_FEED_URL
from quakemonitor.core.earthquake import USGS_SOURCE, Earthquake
from quakemonitor.core.errors import HttpStatusError, NetworkError, TotalFailure
from quakemonitor.shell.cache_store import CacheStore, MemoryKeyValueStore
from quakemonitor.shell.feed_client import FeedClient
from quakemonitor.shell.usgs_client import USGSClient


T0 = 1_741_500_000_000

FEED = {
    "type": "FeatureCollection",
    "features": [
        {
            "id": "us1",
            "properties": {"mag": 3.1, "place": "Sylhet", "time": 1741400000000},
            "geometry": {"coordinates": [91.9, 24.9, 10]},
        },
        {
            "id": "us2",
            "properties": {"mag": 6.2, "place": "Chittagong", "time": 1741450000000},
            "geometry": {"coordinates": [91.8, 22.3, 40]},
        },
    ],
}

CACHED_EVENT = Earthquake(
    id="cached1",
    location="Dhaka",
    magnitude=4.1,
    depth="10 km",
    occurred_at=1741000000000,
    display_time="01:00 AM",
    display_date="3/3/2025",
    lat=23.8,
    lon=90.4,
)


class CountingStore(MemoryKeyValueStore):
    """Memory store that counts writes."""

    def __init__(self):
        super().__init__()
        self.writes = 0

    def set(self, key, value):
        self.writes += 1
        super().set(key, value)


class Clock:
    def __init__(self, now_ms):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms


@pytest.fixture
def usgs():
    client = Mock(spec=USGSClient)
    client.fetch_dashboard_feed.return_value = FEED
    return client


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def clock():
    return Clock(T0)


@pytest.fixture
def feed(usgs, store, clock):
    return FeedClient(usgs, CacheStore(store), tz=timezone.utc, clock=clock)


def seed_cache(store, fetched_at):
    CacheStore(store).write(CacheEntry(
        fetched_at=fetched_at,
        events=[CACHED_EVENT],
        sources=[USGS_SOURCE],
    ))
    store.writes = 0


class TestFastPath:
    """Tests for serving a fresh cache entry."""

    def test_cold_fetch_goes_to_network(self, feed, usgs):
        result = feed.fetch()

        assert [e.id for e in result.events] == ["us1", "us2"]
        assert result.sources == [USGS_SOURCE]
        assert result.from_cache is False
        usgs.fetch_dashboard_feed.assert_called_once()

    def test_second_fetch_within_ttl_is_idempotent(self, feed, usgs, clock):
        """Two calls inside the TTL make one network request and agree."""
        first = feed.fetch()
        clock.now_ms += 59_999
        second = feed.fetch()

        assert usgs.fetch_dashboard_feed.call_count == 1
        assert second.events == first.events
        assert second.from_cache is True

    def test_entry_30_seconds_old_is_served(self, feed, usgs, store):
        seed_cache(store, T0 - 30_000)

        result = feed.fetch()

        assert result.events == [CACHED_EVENT]
        assert result.from_cache is True
        assert result.stale is False
        assert result.fallback is False
        usgs.fetch_dashboard_feed.assert_not_called()

    def test_entry_exactly_ttl_old_is_refetched(self, feed, usgs, store):
        seed_cache(store, T0 - 60_000)

        result = feed.fetch()

        assert result.from_cache is False
        usgs.fetch_dashboard_feed.assert_called_once()

    def test_force_refresh_skips_fresh_entry(self, feed, usgs, store):
        seed_cache(store, T0 - 1_000)

        result = feed.fetch(force_refresh=True)

        assert result.from_cache is False
        usgs.fetch_dashboard_feed.assert_called_once()

    def test_corrupt_entry_is_a_miss(self, feed, usgs, store):
        store.values[CACHE_KEY] = "garbage"

        result = feed.fetch()

        assert result.from_cache is False
        usgs.fetch_dashboard_feed.assert_called_once()


class TestCacheWrites:
    """Tests for how the network path updates the slot."""

    def test_exactly_one_write_per_network_success(self, feed, store):
        feed.fetch(force_refresh=True)
        assert store.writes == 1

    def test_written_entry_is_timestamped_now(self, feed, store):
        feed.fetch()

        entry = CacheStore(store).read()
        assert entry.fetched_at == T0
        assert [e.id for e in entry.events] == ["us1", "us2"]

    def test_failure_does_not_write(self, feed, usgs, store):
        seed_cache(store, T0 - 600_000)
        usgs.fetch_dashboard_feed.side_effect = NetworkError("down")

        feed.fetch()

        assert store.writes == 0


class TestFallback:
    """Tests for stale-cache fallback and total failure."""

    def test_stale_entry_served_when_network_fails(self, feed, usgs, store):
        seed_cache(store, T0 - 10 * 60_000)
        usgs.fetch_dashboard_feed.side_effect = NetworkError("timeout")

        result = feed.fetch()

        assert result.events == [CACHED_EVENT]
        assert result.from_cache is True
        assert result.stale is True
        assert result.fallback is True

    def test_http_status_error_also_falls_back(self, feed, usgs, store):
        seed_cache(store, T0 - 10 * 60_000)
        usgs.fetch_dashboard_feed.side_effect = HttpStatusError(500, "Internal Server Error")

        assert feed.fetch().events == [CACHED_EVENT]

    def test_fresh_entry_served_when_forced_fetch_fails(self, feed, usgs, store):
        seed_cache(store, T0 - 5_000)
        usgs.fetch_dashboard_feed.side_effect = NetworkError("down")

        result = feed.fetch(force_refresh=True)

        assert result.from_cache is True
        assert result.stale is False

    def test_unusable_body_falls_back(self, feed, usgs, store):
        seed_cache(store, T0 - 10 * 60_000)
        usgs.fetch_dashboard_feed.return_value = {"type": "FeatureCollection"}

        assert feed.fetch().events == [CACHED_EVENT]

    def test_total_failure_without_cache(self, feed, usgs):
        usgs.fetch_dashboard_feed.side_effect = NetworkError("down")

        with pytest.raises(TotalFailure):
            feed.fetch()

    def test_cache_write_failure_without_cache_is_total_failure(self, usgs, clock):
        class BrokenStore(MemoryKeyValueStore):
            def set(self, key, value):
                raise OSError("disk full")

        feed = FeedClient(usgs, CacheStore(BrokenStore()), tz=timezone.utc, clock=clock)

        with pytest.raises(TotalFailure):
            feed.fetch()


class TestMalformedFeedBodies:
    """A real USGS client over `responses` serving ill-shaped bodies."""

    @pytest.fixture
    def http_feed(self, store, clock):
        return FeedClient(USGSClient(), CacheStore(store), tz=timezone.utc, clock=clock)

    @pytest.mark.parametrize(
        "body",
        [
            {"type": "FeatureCollection", "metadata": {"count": 0}, "features": None},
            {"type": "FeatureCollection", "metadata": None, "features": None},
            {"type": "FeatureCollection"},
        ],
    )
    @responses.activate
    def test_missing_feature_list_falls_back_to_cache(self, http_feed, store, body):
        responses.add(responses.GET, DEFAULT_FEED_URL, json=body, status=200)
        seed_cache(store, T0 - 10 * 60_000)

        result = http_feed.fetch(force_refresh=True)

        assert result.events == [CACHED_EVENT]
        assert result.fallback is True
        assert store.writes == 0

    @responses.activate
    def test_missing_feature_list_without_cache_is_total_failure(self, http_feed):
        responses.add(responses.GET, DEFAULT_FEED_URL, json={"features": None}, status=200)

        with pytest.raises(TotalFailure):
            http_feed.fetch()

    @responses.activate
    def test_null_metadata_with_features_is_fine(self, http_feed):
        responses.add(
            responses.GET,
            DEFAULT_FEED_URL,
            json={"metadata": None, "features": FEED["features"]},
            status=200,
        )

        result = http_feed.fetch()

        assert [e.id for e in result.events] == ["us1", "us2"]
        assert result.fallback is False
