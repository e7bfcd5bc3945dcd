"""Derived views over the canonical event list - Pure functions.

Every view (stat cards, list, chart) is computed from the same newest-first
list held in AppState. Nothing here sorts independently.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Sequence

from quakemonitor.core.earthquake import Earthquake
from quakemonitor.core.markers import HIGH_COLOR, MINOR_COLOR, MODERATE_COLOR
from quakemonitor.core.state import AppState


@dataclass(frozen=True)
class SummaryStats:
    """Aggregate statistics for the stat cards.

    Attributes:
        total_count: Number of events
        max_magnitude: Largest magnitude, 0 when there are no events
        latest_location: Location of the newest event, None when empty
        latest_magnitude: Magnitude of the newest event, None when empty
    """
    total_count: int
    max_magnitude: float
    latest_location: str | None
    latest_magnitude: float | None


@dataclass(frozen=True)
class ChartPoint:
    """One bar of the magnitude trend chart.

    Attributes:
        event_id: Earthquake ID
        label: Axis label
        magnitude: Bar height
        location: Tooltip text
        color: Bar color
    """
    event_id: str
    label: str
    magnitude: float
    location: str
    color: str


def total_count(earthquakes: Sequence[Earthquake]) -> int:
    return len(earthquakes)


def max_magnitude(earthquakes: Sequence[Earthquake]) -> float:
    """Largest magnitude in the list, 0 for an empty list."""
    if not earthquakes:
        return 0
    return max(e.magnitude for e in earthquakes)


def latest_earthquake(earthquakes: Sequence[Earthquake]) -> Earthquake | None:
    """The newest event: the first element of the newest-first list."""
    if not earthquakes:
        return None
    return earthquakes[0]


def compute_summary(earthquakes: Sequence[Earthquake]) -> SummaryStats:
    """Compute all stat card values at once.

    Pure function.

    Args:
        earthquakes: Canonical newest-first event list

    Returns:
        SummaryStats for the list
    """
    latest = latest_earthquake(earthquakes)
    return SummaryStats(
        total_count=total_count(earthquakes),
        max_magnitude=max_magnitude(earthquakes),
        latest_location=latest.location if latest else None,
        latest_magnitude=latest.magnitude if latest else None,
    )


def chronological(earthquakes: Sequence[Earthquake]) -> list[Earthquake]:
    """Oldest-first order, the exact reverse of the canonical order."""
    return list(reversed(earthquakes))


def get_chart_bar_color(magnitude: float) -> str:
    """Bar color for the trend chart.

    Pure function. Thresholds are strict, unlike the map marker tiers.
    """
    if magnitude > 5:
        return HIGH_COLOR
    elif magnitude > 4:
        return MODERATE_COLOR
    return MINOR_COLOR


def chart_label(earthquake: Earthquake) -> str:
    """Short axis label: the time of day without the AM/PM suffix."""
    parts = earthquake.display_time.split(" ")
    return parts[0] or earthquake.display_date


def build_chart_series(earthquakes: Sequence[Earthquake]) -> list[ChartPoint]:
    """Chart series in chronological order.

    Pure function.

    Args:
        earthquakes: Canonical newest-first event list

    Returns:
        Chart points, oldest first
    """
    return [
        ChartPoint(
            event_id=e.id,
            label=chart_label(e),
            magnitude=e.magnitude,
            location=e.location,
            color=get_chart_bar_color(e.magnitude),
        )
        for e in chronological(earthquakes)
    ]


def get_badge_severity(magnitude: float) -> str:
    """Severity of a list item's magnitude badge.

    Pure function.
    """
    if magnitude >= 6:
        return "severe"
    elif magnitude >= 4.5:
        return "high"
    elif magnitude >= 3:
        return "moderate"
    return "low"


def get_intensity_type(max_mag: float) -> str:
    """Tone of the max magnitude stat card ('danger', 'warning', 'neutral')."""
    if max_mag > 5:
        return "danger"
    elif max_mag > 4:
        return "warning"
    return "neutral"


def get_intensity_label(max_mag: float) -> str:
    return "High Intensity" if max_mag > 5 else "Low-Med Intensity"


def format_last_updated(last_updated: datetime | None, tz: tzinfo) -> str:
    """Header text for the last successful refresh."""
    if last_updated is None:
        return "Never"
    return last_updated.astimezone(tz).strftime("%I:%M:%S %p")


def earthquake_to_list_item(earthquake: Earthquake) -> dict[str, Any]:
    """Convert an Earthquake to a JSON-serializable list row."""
    coordinates = None
    if earthquake.is_mappable:
        coordinates = f"{earthquake.lat:.2f}, {earthquake.lon:.2f}"

    return {
        "id": earthquake.id,
        "location": earthquake.location,
        "magnitude": earthquake.magnitude,
        "magnitude_display": f"{earthquake.magnitude:.1f}",
        "severity": get_badge_severity(earthquake.magnitude),
        "depth": earthquake.depth,
        "time": earthquake.display_time,
        "date": earthquake.display_date,
        "timestamp": earthquake.occurred_at,
        "lat": earthquake.lat,
        "lon": earthquake.lon,
        "coordinates": coordinates,
        "source_url": earthquake.source_url,
    }


def build_stat_cards(state: AppState, region_name: str) -> list[dict[str, Any]]:
    """Build the three stat cards.

    Pure function. While cold-loading the values are placeholders.

    Args:
        state: Current application state
        region_name: Subtitle for the event count card

    Returns:
        List of card dicts with label, value, sub_value and type
    """
    summary = compute_summary(state.events)
    cold = state.is_cold_loading

    if summary.latest_magnitude is not None:
        latest_value = f"{summary.latest_magnitude:.1f}"
    else:
        latest_value = "-"

    return [
        {
            "label": "Events (Last 365 Days)",
            "value": "-" if cold else summary.total_count,
            "sub_value": region_name,
            "type": "neutral",
        },
        {
            "label": "Max Magnitude",
            "value": "-" if cold else f"{summary.max_magnitude:.1f}",
            "sub_value": "..." if cold else get_intensity_label(summary.max_magnitude),
            "type": get_intensity_type(summary.max_magnitude),
        },
        {
            "label": "Latest Activity",
            "value": "..." if cold else latest_value,
            "sub_value": summary.latest_location or "N/A",
            "type": "neutral",
        },
    ]
