"""Functional Core - Pure functions with no side effects.

This module contains all dashboard logic as pure functions:
- Earthquake parsing and display formatting
- Cache entry encoding and freshness
- Application state transitions
- Map marker styling and reconciliation diffs
- Derived views (stats, list, chart)

All functions here are deterministic and have no I/O.
"""

from quakemonitor.core.earthquake import Earthquake, SourceRef, parse_earthquakes
from quakemonitor.core.cache import CacheEntry, is_fresh
from quakemonitor.core.state import AppState
from quakemonitor.core.markers import MarkerDiff, MarkerSpec, compute_marker_diff
from quakemonitor.core.projections import SummaryStats, build_chart_series, compute_summary

__all__ = [
    # Earthquake
    "Earthquake",
    "SourceRef",
    "parse_earthquakes",
    # Cache
    "CacheEntry",
    "is_fresh",
    # State
    "AppState",
    # Markers
    "MarkerDiff",
    "MarkerSpec",
    "compute_marker_diff",
    # Projections
    "SummaryStats",
    "build_chart_series",
    "compute_summary",
]
