"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS API client (HTTP)
- Cache store (local file)
- Feed client (cache-first fetch protocol)
- Map client (marker reconciliation, map rendering)
- Configuration loading (environment/files)

Keep this layer thin and simple. All dashboard logic should be in core.
"""

from quakemonitor.shell.usgs_client import USGSClient
from quakemonitor.shell.cache_store import CacheStore, FileKeyValueStore
from quakemonitor.shell.feed_client import FeedClient
from quakemonitor.shell.map_client import MarkerReconciler, StaticMapBackend
from quakemonitor.shell.config_loader import load_config, Config

__all__ = [
    "USGSClient",
    "CacheStore",
    "FileKeyValueStore",
    "FeedClient",
    "MarkerReconciler",
    "StaticMapBackend",
    "load_config",
    "Config",
]
