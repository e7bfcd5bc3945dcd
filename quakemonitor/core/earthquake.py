"""Earthquake data models and parsing - Pure functions.

This module maps USGS GeoJSON features into the dashboard's Earthquake
records. Display strings are computed once here, in the viewer's time zone,
so every view shows the same text for an event.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any


UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN_DEPTH = "Unknown"


@dataclass(frozen=True)
class SourceRef:
    """Attribution for the data shown on the dashboard.

    Attributes:
        title: Display name of the source
        uri: Link to the source
    """
    title: str
    uri: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "uri": self.uri}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceRef":
        return cls(title=str(data["title"]), uri=str(data["uri"]))


USGS_SOURCE = SourceRef(
    title="USGS Earthquake Hazards Program",
    uri="https://earthquake.usgs.gov/",
)


@dataclass(frozen=True)
class Earthquake:
    """Immutable seismic event record.

    Attributes:
        id: Unique USGS event ID
        location: Human-readable place description
        magnitude: Event magnitude (0 when the feed has none)
        depth: Depth display string, e.g. "10 km"
        occurred_at: Event time in epoch milliseconds
        display_time: Local time of day, e.g. "02:05 PM"
        display_date: Local date, e.g. "3/9/2025"
        lat: Epicenter latitude, None when unknown
        lon: Epicenter longitude, None when unknown
        source_url: USGS event page, None when unknown
    """
    id: str
    location: str
    magnitude: float
    depth: str
    occurred_at: int
    display_time: str
    display_date: str
    lat: float | None = None
    lon: float | None = None
    source_url: str | None = None

    @property
    def is_mappable(self) -> bool:
        """True when both coordinates are known."""
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the cached record shape."""
        return {
            "id": self.id,
            "location": self.location,
            "magnitude": self.magnitude,
            "depth": self.depth,
            "time": self.display_time,
            "date": self.display_date,
            "timestamp": self.occurred_at,
            "lat": self.lat,
            "lon": self.lon,
            "sourceUrl": self.source_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Earthquake":
        """Rebuild an Earthquake from its cached record shape.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        return cls(
            id=str(data["id"]),
            location=str(data["location"]),
            magnitude=float(data["magnitude"]),
            depth=str(data["depth"]),
            occurred_at=int(data["timestamp"]),
            display_time=str(data["time"]),
            display_date=str(data["date"]),
            lat=_optional_float(data.get("lat")),
            lon=_optional_float(data.get("lon")),
            source_url=data.get("sourceUrl"),
        )


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


def format_depth(depth_km: Any) -> str:
    """Render a raw depth value as a display string with unit.

    Pure function. Whole numbers drop the decimal part ("10 km").
    """
    if depth_km is None:
        return UNKNOWN_DEPTH
    value = float(depth_km)
    if value.is_integer():
        return f"{int(value)} km"
    return f"{value} km"


def format_display_time(occurred_at: int, tz: tzinfo) -> str:
    """Format epoch milliseconds as a two-digit hour/minute string.

    Pure function.
    """
    local = datetime.fromtimestamp(occurred_at / 1000, tz=tz)
    return local.strftime("%I:%M %p")


def format_display_date(occurred_at: int, tz: tzinfo) -> str:
    """Format epoch milliseconds as a short month/day/year date.

    Pure function.
    """
    local = datetime.fromtimestamp(occurred_at / 1000, tz=tz)
    return f"{local.month}/{local.day}/{local.year}"


def parse_earthquake(feature: dict[str, Any], tz: tzinfo) -> Earthquake | None:
    """Parse a single GeoJSON feature into an Earthquake.

    Pure function. Missing magnitude becomes 0, missing place becomes a
    placeholder, missing coordinates leave the event unmappable. A feature
    without an id or a time cannot be ordered or tracked and yields None.

    Args:
        feature: GeoJSON feature dict from USGS API
        tz: Viewer time zone for display strings

    Returns:
        Earthquake object or None if the feature is unusable
    """
    try:
        event_id = feature.get("id")
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        time_ms = props.get("time")
        if not event_id or time_ms is None:
            return None

        occurred_at = int(time_ms)

        lon = float(coords[0]) if len(coords) > 0 and coords[0] is not None else None
        lat = float(coords[1]) if len(coords) > 1 and coords[1] is not None else None
        depth = format_depth(coords[2] if len(coords) > 2 else None)

        return Earthquake(
            id=str(event_id),
            location=props.get("place") or UNKNOWN_LOCATION,
            magnitude=float(props.get("mag") or 0),
            depth=depth,
            occurred_at=occurred_at,
            display_time=format_display_time(occurred_at, tz),
            display_date=format_display_date(occurred_at, tz),
            lat=lat,
            lon=lon,
            source_url=props.get("url"),
        )
    except (TypeError, ValueError, AttributeError, OverflowError, OSError):
        return None


def parse_earthquakes(geojson: dict[str, Any], tz: tzinfo) -> list[Earthquake]:
    """Parse a USGS GeoJSON response into Earthquakes.

    Pure function: skips unusable features and keeps the feed's own order.

    Args:
        geojson: Full GeoJSON FeatureCollection from USGS API
        tz: Viewer time zone for display strings

    Returns:
        List of Earthquake objects in feed order

    Raises:
        ValueError: If the response has no feature list
    """
    features = geojson.get("features")
    if not isinstance(features, list):
        raise ValueError("GeoJSON response has no 'features' list")

    earthquakes = []
    for feature in features:
        earthquake = parse_earthquake(feature, tz)
        if earthquake is not None:
            earthquakes.append(earthquake)

    return earthquakes


def sort_newest_first(earthquakes: list[Earthquake]) -> list[Earthquake]:
    """Sort by event time, newest first.

    Pure function. The sort is stable, so events sharing a timestamp keep
    the feed's order.
    """
    return sorted(earthquakes, key=lambda e: e.occurred_at, reverse=True)
