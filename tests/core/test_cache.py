"""Unit tests for cache entry encoding and freshness.

Pure function tests - no mocks needed.
"""

import json

import pytest

from quakemonitor.core.cache import (
    CACHE_TTL_MS,
    CacheEntry,
    deserialize_entry,
    is_fresh,
    serialize_entry,
)
from quakemonitor.core.earthquake import USGS_SOURCE, Earthquake
from quakemonitor.core.errors import CacheReadError


@pytest.fixture
def sample_entry():
    """Create a cache entry holding one event."""
    return CacheEntry(
        fetched_at=1_000_000,
        events=[
            Earthquake(
                id="us1",
                location="Sylhet, Bangladesh",
                magnitude=4.2,
                depth="10 km",
                occurred_at=900_000,
                display_time="10:15 AM",
                display_date="3/9/2025",
                lat=24.9,
                lon=91.87,
                source_url="https://earthquake.usgs.gov/earthquakes/eventpage/us1",
            ),
        ],
        sources=[USGS_SOURCE],
    )


class TestIsFresh:
    """Tests for is_fresh()."""

    def test_young_entry_is_fresh(self, sample_entry):
        """An entry aged 30 s is within the 60 s TTL."""
        assert is_fresh(sample_entry, sample_entry.fetched_at + 30_000) is True

    def test_entry_at_ttl_is_stale(self, sample_entry):
        """The TTL boundary itself is no longer fresh."""
        assert is_fresh(sample_entry, sample_entry.fetched_at + CACHE_TTL_MS) is False

    def test_custom_ttl(self, sample_entry):
        assert is_fresh(sample_entry, sample_entry.fetched_at + 5, ttl_ms=10) is True
        assert is_fresh(sample_entry, sample_entry.fetched_at + 11, ttl_ms=10) is False


class TestSerialization:
    """Tests for serialize_entry() / deserialize_entry()."""

    def test_record_shape(self, sample_entry):
        """Encoded record uses timestamp/data/sources keys."""
        record = json.loads(serialize_entry(sample_entry))

        assert record["timestamp"] == 1_000_000
        assert record["data"][0]["id"] == "us1"
        assert record["data"][0]["sourceUrl"].endswith("us1")
        assert record["sources"] == [
            {"title": "USGS Earthquake Hazards Program", "uri": "https://earthquake.usgs.gov/"},
        ]

    def test_decodes_encoded_entry(self, sample_entry):
        assert deserialize_entry(serialize_entry(sample_entry)) == sample_entry

    def test_missing_sources_defaults_to_empty(self):
        entry = deserialize_entry(json.dumps({"timestamp": 5, "data": []}))
        assert entry.sources == []

    @pytest.mark.parametrize("raw", [
        "not json at all",
        "[]",
        "null",
        json.dumps({"data": []}),
        json.dumps({"timestamp": 5, "data": [{"id": "x"}]}),
        json.dumps({"timestamp": "soon", "data": []}),
    ])
    def test_malformed_records_raise_cache_read_error(self, raw):
        """Anything that is not a complete cache record is a read error."""
        with pytest.raises(CacheReadError):
            deserialize_entry(raw)
