"""Map marker styling and reconciliation diff - Pure functions.

This module decides what the map should show. Applying the decision to a
concrete map (I/O) is handled by the shell layer (shell/map_client.py).
"""

from dataclasses import dataclass
from typing import Iterable

from quakemonitor.core.earthquake import Earthquake


HIGH_COLOR = "#ef4444"      # red-500
MODERATE_COLOR = "#f97316"  # orange-500
MINOR_COLOR = "#3b82f6"     # blue-500

OUTLINE_COLOR = "#ffffff"
MIN_MARKER_RADIUS = 5


@dataclass(frozen=True)
class MarkerStyle:
    """Immutable appearance of one event marker.

    Attributes:
        fill_color: Hex fill color from the magnitude tier
        radius: Circle radius in pixels
        outline_color: Hex color of the ring around the circle
        outline_width: Ring width in pixels
        opacity: Ring opacity
        fill_opacity: Fill opacity
    """
    fill_color: str
    radius: float
    outline_color: str = OUTLINE_COLOR
    outline_width: int = 1
    opacity: float = 0.8
    fill_opacity: float = 0.6


@dataclass(frozen=True)
class MarkerSpec:
    """Everything needed to draw one event on the map.

    Attributes:
        event_id: Earthquake ID the marker represents
        latitude: Marker latitude
        longitude: Marker longitude
        style: Marker appearance
        popup: Descriptive metadata shown when the marker is opened
    """
    event_id: str
    latitude: float
    longitude: float
    style: MarkerStyle
    popup: dict[str, str]


@dataclass(frozen=True)
class MarkerDiff:
    """Changes needed to bring the map in line with the event list.

    Attributes:
        to_add: Markers for events not on the map yet
        to_remove: IDs of markers whose events are gone
    """
    to_add: list[MarkerSpec]
    to_remove: list[str]

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


@dataclass(frozen=True)
class LegendEntry:
    color: str
    label: str


MAGNITUDE_LEGEND = (
    LegendEntry(HIGH_COLOR, "5.0+ (High)"),
    LegendEntry(MODERATE_COLOR, "4.0 - 4.9 (Mod)"),
    LegendEntry(MINOR_COLOR, "< 4.0 (Minor)"),
)


def get_marker_color(magnitude: float) -> str:
    """Get the marker fill color for a magnitude tier.

    Pure function.

    Args:
        magnitude: Earthquake magnitude

    Returns:
        Hex color string
    """
    if magnitude >= 5.0:
        return HIGH_COLOR
    elif magnitude >= 4.0:
        return MODERATE_COLOR
    return MINOR_COLOR


def get_marker_radius(magnitude: float) -> float:
    """Scale the marker with magnitude, never below a visible minimum.

    Pure function.
    """
    return max(magnitude * 3, MIN_MARKER_RADIUS)


def create_marker_style(magnitude: float) -> MarkerStyle:
    """Build the deterministic style for a magnitude.

    Pure function.
    """
    return MarkerStyle(
        fill_color=get_marker_color(magnitude),
        radius=get_marker_radius(magnitude),
    )


def build_popup(earthquake: Earthquake) -> dict[str, str]:
    """Descriptive metadata attached to a marker.

    Pure function.
    """
    return {
        "location": earthquake.location,
        "magnitude": f"{earthquake.magnitude:.1f}",
        "magnitude_tone": "moderate" if earthquake.magnitude >= 4 else "minor",
        "depth": earthquake.depth,
        "time": earthquake.display_time,
        "date": earthquake.display_date,
    }


def create_marker_spec(earthquake: Earthquake) -> MarkerSpec:
    """Build the marker for a mappable earthquake.

    Pure function.

    Raises:
        ValueError: If the earthquake has no coordinates
    """
    if earthquake.lat is None or earthquake.lon is None:
        raise ValueError(f"Earthquake {earthquake.id} has no coordinates")

    return MarkerSpec(
        event_id=earthquake.id,
        latitude=earthquake.lat,
        longitude=earthquake.lon,
        style=create_marker_style(earthquake.magnitude),
        popup=build_popup(earthquake),
    )


def get_mappable_earthquakes(earthquakes: Iterable[Earthquake]) -> list[Earthquake]:
    """Filter to earthquakes with both coordinates.

    Pure function.
    """
    return [e for e in earthquakes if e.is_mappable]


def compute_marker_diff(
    earthquakes: Iterable[Earthquake],
    rendered_ids: Iterable[str],
) -> MarkerDiff:
    """Compute the add/remove diff between events and rendered markers.

    Pure function. Events already rendered are left out of the diff even if
    their magnitude or location changed: an event ID denotes one immutable
    event version.

    Args:
        earthquakes: Canonical event list
        rendered_ids: IDs currently on the map

    Returns:
        MarkerDiff whose application makes the rendered ID set equal the
        set of mappable event IDs
    """
    rendered = set(rendered_ids)
    active_ids: set[str] = set()
    to_add: list[MarkerSpec] = []

    for earthquake in get_mappable_earthquakes(earthquakes):
        if earthquake.id in active_ids:
            continue
        active_ids.add(earthquake.id)
        if earthquake.id not in rendered:
            to_add.append(create_marker_spec(earthquake))

    to_remove = [event_id for event_id in rendered if event_id not in active_ids]

    return MarkerDiff(to_add=to_add, to_remove=sorted(to_remove))
