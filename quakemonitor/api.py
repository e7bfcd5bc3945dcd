"""Dashboard API - FastAPI service for the quake monitor.

Serves the canonical dashboard state and the views derived from it, plus a
rendered map and a manual refresh trigger. Part of the imperative shell -
handles HTTP I/O; all view logic is in core.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

import requests
from fastapi import APIRouter, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from quakemonitor.core.config import REFRESH_INTERVAL_MS, Config
from quakemonitor.core.markers import MAGNITUDE_LEGEND, MarkerSpec
from quakemonitor.core.projections import (
    build_chart_series,
    build_stat_cards,
    compute_summary,
    earthquake_to_list_item,
    format_last_updated,
)
from quakemonitor.core.state import AppState
from quakemonitor.refresh import RefreshController
from quakemonitor.shell.cache_store import CacheStore, FileKeyValueStore
from quakemonitor.shell.config_loader import load_config
from quakemonitor.shell.feed_client import FeedClient
from quakemonitor.shell.map_client import MapBackend, MarkerReconciler, StaticMapBackend
from quakemonitor.shell.usgs_client import USGSClient


logger = logging.getLogger(__name__)

router = APIRouter()


class RefreshResponse(BaseModel):
    started: bool
    loading: bool
    error: str | None = None
    count: int
    last_updated: str | None = None


def build_controller(config: Config) -> RefreshController:
    """Wire the feed pipeline described by a configuration.

    The USGS client keeps one HTTP session so timer ticks reuse connections.
    """
    cache_store = CacheStore(FileKeyValueStore(config.cache_dir))
    usgs_client = USGSClient(
        base_url=config.feed_url,
        timeout=config.request_timeout_seconds,
        session=requests.Session(),
    )
    feed_client = FeedClient(usgs_client, cache_store, tz=config.tz)
    return RefreshController(feed_client)


def _controller(request: Request) -> RefreshController:
    return request.app.state.controller


def _config(request: Request) -> Config:
    return request.app.state.config


def _marker_to_dict(spec: MarkerSpec) -> dict[str, Any]:
    return {
        "id": spec.event_id,
        "lat": spec.latitude,
        "lon": spec.longitude,
        "fill_color": spec.style.fill_color,
        "radius": spec.style.radius,
        "outline_color": spec.style.outline_color,
        "outline_width": spec.style.outline_width,
        "opacity": spec.style.opacity,
        "fill_opacity": spec.style.fill_opacity,
        "popup": spec.popup,
    }


def _state_to_dict(state: AppState) -> dict[str, Any]:
    return {
        "loading": state.loading,
        "error": state.error,
        "show_error_banner": state.show_error_banner,
        "events": [earthquake_to_list_item(e) for e in state.events],
        "last_updated": state.last_updated.isoformat() if state.last_updated else None,
        "sources": [s.to_dict() for s in state.sources],
    }


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/api/state")
async def get_state(request: Request):
    """Snapshot of the canonical dashboard state."""
    return _state_to_dict(_controller(request).state)


@router.get("/api/earthquakes")
async def get_earthquakes(request: Request):
    """List view: events newest first."""
    state = _controller(request).state
    return {
        "loading": state.is_cold_loading,
        "earthquakes": [earthquake_to_list_item(e) for e in state.events],
        "count": len(state.events),
    }


@router.get("/api/stats")
async def get_stats(request: Request):
    """Summary statistics over the event list."""
    summary = compute_summary(_controller(request).state.events)
    return {
        "total_count": summary.total_count,
        "max_magnitude": summary.max_magnitude,
        "latest_location": summary.latest_location,
        "latest_magnitude": summary.latest_magnitude,
    }


@router.get("/api/chart")
async def get_chart(request: Request):
    """Magnitude trend series, oldest first."""
    series = build_chart_series(_controller(request).state.events)
    return {
        "series": [
            {
                "id": p.event_id,
                "name": p.label,
                "magnitude": p.magnitude,
                "location": p.location,
                "color": p.color,
            }
            for p in series
        ],
    }


@router.get("/api/markers")
async def get_markers(request: Request):
    """Markers currently drawn on the map."""
    reconciler: MarkerReconciler = request.app.state.reconciler
    return {
        "markers": [_marker_to_dict(m) for m in reconciler.marker_specs()],
        "legend": [{"color": e.color, "label": e.label} for e in MAGNITUDE_LEGEND],
    }


@router.get("/api/map.png")
async def get_map_image(request: Request):
    """Rendered map of the current markers."""
    backend = request.app.state.map_backend
    if not hasattr(backend, "render"):
        raise HTTPException(status_code=501, detail="Map backend cannot render images")

    result = await asyncio.to_thread(backend.render)
    if not result.success or result.image_bytes is None:
        raise HTTPException(status_code=503, detail=f"Map rendering failed: {result.error}")

    return Response(content=result.image_bytes, media_type="image/png")


@router.get("/api/dashboard")
async def get_dashboard(request: Request):
    """Everything the dashboard page shows, composed from one state snapshot."""
    config = _config(request)
    state = _controller(request).state
    cold = state.is_cold_loading

    return {
        "header": {
            "last_updated": format_last_updated(state.last_updated, config.tz),
            "loading": cold,
        },
        "error_banner": state.error if state.show_error_banner else None,
        "notice": state.error if state.error and state.events else None,
        "stats": build_stat_cards(state, config.region_name),
        "earthquakes": [earthquake_to_list_item(e) for e in state.events],
        "chart": None if cold else [
            {"name": p.label, "magnitude": p.magnitude, "location": p.location, "color": p.color}
            for p in build_chart_series(state.events)
        ],
        "sources": [s.to_dict() for s in state.sources],
        "refresh_interval_seconds": REFRESH_INTERVAL_MS // 1000,
        "loading": cold,
    }


@router.post("/api/refresh", response_model=RefreshResponse)
async def trigger_refresh(request: Request, response: Response):
    """Manual refresh that bypasses the cache.

    Answers 409 when a refresh is already running; the trigger is dropped.
    """
    controller = _controller(request)
    started = await controller.refresh(force_refresh=True)
    if not started:
        response.status_code = 409

    state = controller.state
    return RefreshResponse(
        started=started,
        loading=state.loading,
        error=state.error,
        count=len(state.events),
        last_updated=state.last_updated.isoformat() if state.last_updated else None,
    )


def create_app(
    config: Config | None = None,
    controller: RefreshController | None = None,
    map_backend: MapBackend | None = None,
    run_refresh_loop: bool = True,
) -> FastAPI:
    """Build the dashboard application.

    Args:
        config: Application configuration (loaded if not provided)
        controller: Refresh controller (wired from config if not provided)
        map_backend: Map to draw markers on (staticmap if not provided)
        run_refresh_loop: Start the startup refresh and timer with the app

    Returns:
        FastAPI application
    """
    config = config or load_config()
    controller = controller or build_controller(config)
    map_backend = map_backend or StaticMapBackend(
        width=config.map_width,
        height=config.map_height,
        tile_url=config.tile_url,
    )

    reconciler = MarkerReconciler(map_backend)
    controller.subscribe(lambda state: reconciler.reconcile(state.events))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_refresh_loop:
            controller.start()
        yield
        await controller.stop()

    app = FastAPI(
        title="Quake Monitor API",
        description="Seismic activity dashboard for Bangladesh, powered by USGS",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.controller = controller
    app.state.map_backend = map_backend
    app.state.reconciler = reconciler

    app.include_router(router)

    return app
