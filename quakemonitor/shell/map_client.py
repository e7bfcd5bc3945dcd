"""Map Client - Imperative Shell.

This module keeps the rendered map in line with the event list. The map is
reached only through the narrow MapBackend capability; the shipped backend
draws markers with the staticmap library and renders PNG snapshots.

What to add and remove is decided by the pure diff in core/markers.py.
"""

import io
import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from staticmap import CircleMarker, StaticMap

from quakemonitor.core.config import DEFAULT_TILE_URL
from quakemonitor.core.earthquake import Earthquake
from quakemonitor.core.geo import DEFAULT_MAP_VIEW, MapView
from quakemonitor.core.markers import MarkerDiff, MarkerSpec, compute_marker_diff


logger = logging.getLogger(__name__)


class MapBackend(Protocol):
    """Capability interface over a concrete map renderer."""

    def add_marker(self, spec: MarkerSpec) -> Any:
        """Draw a marker and return an opaque handle for it."""
        ...

    def remove_marker(self, handle: Any) -> None:
        """Remove a previously added marker."""
        ...

    def set_view(self, latitude: float, longitude: float, zoom: int) -> None:
        """Center the map."""
        ...


@dataclass
class MapImageResult:
    """Result of map image generation.

    Attributes:
        success: Whether the image was generated successfully
        image_bytes: PNG image data if successful
        error: Error message if failed
    """
    success: bool
    image_bytes: bytes | None = None
    error: str | None = None


@dataclass(eq=False)
class StaticMarkerHandle:
    """Handle for a marker drawn on a StaticMapBackend.

    Attributes:
        spec: The marker as it was drawn
        outline: White ring drawn behind the fill
        fill: Magnitude-colored circle
    """
    spec: MarkerSpec
    outline: CircleMarker
    fill: CircleMarker


class StaticMapBackend:
    """Map backend drawing circle markers over map tiles.

    This is part of the imperative shell - rendering fetches map tiles.
    Rendering runs in worker threads while markers change on the event
    loop. Marker changes and render snapshots go through one lock; each
    render draws its own StaticMap from the snapshot.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 450,
        tile_url: str | None = None,
    ) -> None:
        """Initialize static map backend.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            tile_url: Custom tile URL template. Defaults to CARTO dark tiles.
        """
        self.width = width
        self.height = height
        self.tile_url = tile_url or DEFAULT_TILE_URL
        self.static_map = StaticMap(width, height, url_template=self.tile_url)
        self.view: MapView = DEFAULT_MAP_VIEW
        self._lock = threading.Lock()

    def add_marker(self, spec: MarkerSpec) -> StaticMarkerHandle:
        coordinate = (spec.longitude, spec.latitude)  # (lon, lat) order for staticmap
        radius = int(round(spec.style.radius))

        outline = CircleMarker(
            coordinate,
            spec.style.outline_color,
            radius + spec.style.outline_width,
        )
        fill = CircleMarker(coordinate, spec.style.fill_color, radius)

        # Outline first so it renders behind the fill
        with self._lock:
            self.static_map.add_marker(outline)
            self.static_map.add_marker(fill)

        return StaticMarkerHandle(spec=spec, outline=outline, fill=fill)

    def remove_marker(self, handle: StaticMarkerHandle) -> None:
        with self._lock:
            for marker in (handle.outline, handle.fill):
                if marker in self.static_map.markers:
                    self.static_map.markers.remove(marker)

    def set_view(self, latitude: float, longitude: float, zoom: int) -> None:
        with self._lock:
            self.view = MapView(latitude=latitude, longitude=longitude, zoom=zoom)

    def render(self) -> MapImageResult:
        """Render the current markers to a PNG image.

        This method performs I/O (fetches map tiles from tile server).

        Returns:
            MapImageResult with image bytes or error
        """
        with self._lock:
            view = self.view
            markers = list(self.static_map.markers)

        logger.info(
            "Rendering map at (%.4f, %.4f) zoom %d with %d markers",
            view.latitude,
            view.longitude,
            view.zoom,
            len(markers) // 2,
        )

        try:
            frame = StaticMap(self.width, self.height, url_template=self.tile_url)
            for marker in markers:
                frame.add_marker(marker)

            image = frame.render(
                zoom=view.zoom,
                center=[view.longitude, view.latitude],
            )

            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            image_bytes = buffer.getvalue()

            logger.info("Rendered map image: %d bytes", len(image_bytes))

            return MapImageResult(success=True, image_bytes=image_bytes)

        except Exception as e:
            logger.error("Failed to render map: %s", str(e))
            return MapImageResult(success=False, error=str(e))


class MarkerReconciler:
    """Keeps a map's markers in line with the canonical event list.

    The registry maps event IDs to backend handles and lives as long as the
    map view. Only new and vanished events touch the map; markers for events
    that are still present are never redrawn.
    """

    def __init__(
        self,
        backend: MapBackend,
        view: MapView = DEFAULT_MAP_VIEW,
    ) -> None:
        """Initialize reconciler and center the map.

        Args:
            backend: Map to draw on
            view: Initial map center and zoom
        """
        self.backend = backend
        self.registry: dict[str, Any] = {}
        self._specs: dict[str, MarkerSpec] = {}
        self.backend.set_view(view.latitude, view.longitude, view.zoom)

    def reconcile(self, earthquakes: Iterable[Earthquake]) -> MarkerDiff:
        """Bring the map in line with an event list.

        Args:
            earthquakes: Canonical event list

        Returns:
            The diff that was applied
        """
        diff = compute_marker_diff(earthquakes, self.registry.keys())

        for spec in diff.to_add:
            self.registry[spec.event_id] = self.backend.add_marker(spec)
            self._specs[spec.event_id] = spec

        for event_id in diff.to_remove:
            handle = self.registry.pop(event_id)
            self._specs.pop(event_id, None)
            self.backend.remove_marker(handle)

        if not diff.is_empty:
            logger.debug(
                "Reconciled markers: %d added, %d removed, %d on map",
                len(diff.to_add),
                len(diff.to_remove),
                len(self.registry),
            )

        return diff

    def marker_specs(self) -> list[MarkerSpec]:
        """Specs of the markers currently on the map."""
        return list(self._specs.values())
