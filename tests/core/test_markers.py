"""Tests for map marker styling and reconciliation diffs - Pure functions.

These are fast unit tests with no mocks needed since they test pure functions.
"""

import random

import pytest

from quakemonitor.core.earthquake import Earthquake
from quakemonitor.core.markers import (
    HIGH_COLOR,
    MINOR_COLOR,
    MODERATE_COLOR,
    MarkerStyle,
    build_popup,
    compute_marker_diff,
    create_marker_spec,
    create_marker_style,
    get_mappable_earthquakes,
    get_marker_color,
    get_marker_radius,
)


def make_earthquake(
    event_id: str,
    magnitude: float = 3.0,
    lat: float | None = 23.5,
    lon: float | None = 91.2,
) -> Earthquake:
    return Earthquake(
        id=event_id,
        location=f"Near {event_id}",
        magnitude=magnitude,
        depth="12 km",
        occurred_at=1_700_000_000_000,
        display_time="09:30 AM",
        display_date="11/14/2023",
        lat=lat,
        lon=lon,
    )


class TestGetMarkerColor:
    """Tests for get_marker_color()."""

    def test_high_tier_is_red(self):
        """Magnitude >= 5.0 returns red."""
        assert get_marker_color(5.0) == HIGH_COLOR
        assert get_marker_color(7.3) == HIGH_COLOR

    def test_moderate_tier_is_orange(self):
        """Magnitude 4.0-4.9 returns orange."""
        assert get_marker_color(4.0) == MODERATE_COLOR
        assert get_marker_color(4.99) == MODERATE_COLOR

    def test_minor_tier_is_blue(self):
        """Magnitude < 4.0 returns blue."""
        assert get_marker_color(3.99) == MINOR_COLOR
        assert get_marker_color(0) == MINOR_COLOR


class TestGetMarkerRadius:
    """Tests for get_marker_radius()."""

    def test_radius_scales_with_magnitude(self):
        assert get_marker_radius(4.0) == 12.0
        assert get_marker_radius(6.2) == pytest.approx(18.6)

    def test_radius_has_minimum(self):
        """Small earthquakes still have a visible marker."""
        assert get_marker_radius(1.0) == 5
        assert get_marker_radius(0) == 5


class TestCreateMarkerSpec:
    """Tests for create_marker_style() / create_marker_spec()."""

    def test_style_is_deterministic(self):
        assert create_marker_style(4.5) == MarkerStyle(fill_color=MODERATE_COLOR, radius=13.5)

    def test_spec_carries_position_and_popup(self):
        spec = create_marker_spec(make_earthquake("us1", magnitude=5.4))

        assert spec.event_id == "us1"
        assert (spec.latitude, spec.longitude) == (23.5, 91.2)
        assert spec.style.fill_color == HIGH_COLOR
        assert spec.popup["magnitude"] == "5.4"
        assert spec.popup["depth"] == "12 km"
        assert spec.popup["time"] == "09:30 AM"
        assert spec.popup["date"] == "11/14/2023"

    def test_popup_tone(self):
        assert build_popup(make_earthquake("a", magnitude=4.0))["magnitude_tone"] == "moderate"
        assert build_popup(make_earthquake("b", magnitude=3.9))["magnitude_tone"] == "minor"

    def test_unmappable_event_raises(self):
        with pytest.raises(ValueError):
            create_marker_spec(make_earthquake("x", lat=None))


class TestGetMappableEarthquakes:
    """Tests for get_mappable_earthquakes()."""

    def test_requires_both_coordinates(self):
        events = [
            make_earthquake("both"),
            make_earthquake("no-lat", lat=None),
            make_earthquake("no-lon", lon=None),
        ]
        assert [e.id for e in get_mappable_earthquakes(events)] == ["both"]

    def test_zero_coordinates_are_mappable(self):
        """A coordinate of 0 is present, not missing."""
        assert get_mappable_earthquakes([make_earthquake("equator", lat=0.0, lon=0.0)])


class TestComputeMarkerDiff:
    """Tests for compute_marker_diff()."""

    def test_all_new_on_empty_map(self):
        events = [make_earthquake("a"), make_earthquake("b")]
        diff = compute_marker_diff(events, set())

        assert [s.event_id for s in diff.to_add] == ["a", "b"]
        assert diff.to_remove == []

    def test_removes_vanished_events(self):
        diff = compute_marker_diff([make_earthquake("a")], {"a", "gone"})

        assert diff.to_add == []
        assert diff.to_remove == ["gone"]

    def test_existing_markers_untouched_even_if_magnitude_changed(self):
        """An event ID denotes one immutable event version."""
        diff = compute_marker_diff([make_earthquake("a", magnitude=6.5)], {"a"})
        assert diff.is_empty

    def test_unmappable_events_are_removed(self):
        """An event that lost its coordinates leaves the map."""
        diff = compute_marker_diff([make_earthquake("a", lat=None)], {"a"})
        assert diff.to_remove == ["a"]

    def test_duplicate_ids_add_one_marker(self):
        diff = compute_marker_diff([make_earthquake("a"), make_earthquake("a")], set())
        assert len(diff.to_add) == 1

    def test_registry_matches_mappable_ids_for_any_history(self):
        """After applying each diff, rendered IDs equal mappable event IDs."""
        rng = random.Random(1234)
        rendered: set[str] = set()

        for _ in range(200):
            events = [
                make_earthquake(
                    f"ev{rng.randint(0, 15)}",
                    lat=None if rng.random() < 0.2 else 22.0,
                    lon=None if rng.random() < 0.2 else 90.0,
                )
                for _ in range(rng.randint(0, 10))
            ]

            diff = compute_marker_diff(events, rendered)
            rendered |= {s.event_id for s in diff.to_add}
            rendered -= set(diff.to_remove)

            assert rendered == {e.id for e in events if e.is_mappable}
