"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS summary feed client (HTTP)
- Map renderers (map tiles, PNG and HTML output)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quake_dashboard.shell.feed_client import FeedClient, FetchResult
from quake_dashboard.shell.map_layer import (
    MapRenderer,
    ReconcileResult,
    StaticMapRenderer,
    reconcile,
)
from quake_dashboard.shell.folium_renderer import FoliumMapRenderer
from quake_dashboard.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "FeedClient",
    "FetchResult",
    "MapRenderer",
    "ReconcileResult",
    "StaticMapRenderer",
    "reconcile",
    "FoliumMapRenderer",
    "load_config",
    "load_config_from_env",
]
