"""Interactive Map Renderer - Imperative Shell.

Renders markers as a Leaflet map (HTML) via folium, with clickable popups.
"""

import logging

import folium

from quake_dashboard.core.markers import MarkerStyle
from quake_dashboard.shell.map_layer import (
    BASE_CENTER,
    BASE_ZOOM,
    OSM_ATTRIBUTION,
    OSM_TILE_URL,
)


logger = logging.getLogger(__name__)


POPUP_MAX_WIDTH = 300


class FoliumMapRenderer:
    """Builds a Leaflet map of the current markers.

    folium has no public way to empty a layer, so markers are held here and
    a fresh map is assembled on every render.
    """

    def __init__(self, height_px: int = 600) -> None:
        self.height_px = height_px
        self._markers: list[folium.CircleMarker] = []
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    def initialize(self) -> bool:
        """Check that a base map can be built. Safe to call more than once."""
        if self._ready:
            return True

        try:
            self._build_map()
        except Exception as e:
            logger.error("Failed to initialize folium map: %s", str(e))
            return False

        self._ready = True
        return True

    def clear_markers(self) -> None:
        self._markers = []

    def add_marker(
        self,
        position: tuple[float, float],
        style: MarkerStyle,
        popup_html: str,
    ) -> None:
        latitude, longitude = position
        self._markers.append(folium.CircleMarker(
            location=[latitude, longitude],
            radius=style.radius_px,
            popup=folium.Popup(popup_html, max_width=POPUP_MAX_WIDTH),
            color="#ffffff",
            weight=1,
            opacity=1,
            fill=True,
            fill_color=style.color,
            fill_opacity=0.7,
        ))

    def render_html(self) -> str:
        """Render the map as a standalone HTML document."""
        base_map = self._build_map()

        layer = folium.FeatureGroup(name="Earthquakes")
        for marker in self._markers:
            marker.add_to(layer)
        layer.add_to(base_map)

        logger.info("Rendering interactive map with %d markers", len(self._markers))
        return base_map.get_root().render()

    def _build_map(self) -> folium.Map:
        return folium.Map(
            location=list(BASE_CENTER),
            zoom_start=BASE_ZOOM,
            tiles=OSM_TILE_URL,
            attr=OSM_ATTRIBUTION,
            height=self.height_px,
        )
