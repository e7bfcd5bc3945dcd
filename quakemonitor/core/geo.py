"""Geographic constants and helpers - Pure functions.

The dashboard watches one fixed region: Bangladesh plus the border areas
(Assam, Tripura, Myanmar) whose quakes are felt there.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box.

    Attributes:
        min_latitude: Southern boundary
        max_latitude: Northern boundary
        min_longitude: Western boundary
        max_longitude: Eastern boundary
    """
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float


@dataclass(frozen=True)
class MapView:
    """Initial center and zoom of the map view.

    Attributes:
        latitude: Center latitude
        longitude: Center longitude
        zoom: Zoom level
    """
    latitude: float
    longitude: float
    zoom: int


# Feed query region
MONITORED_REGION = BoundingBox(
    min_latitude=19.0,
    max_latitude=28.0,
    min_longitude=87.0,
    max_longitude=94.0,
)

# Roughly the center of Bangladesh
DEFAULT_MAP_VIEW = MapView(latitude=23.6850, longitude=90.3563, zoom=6)
