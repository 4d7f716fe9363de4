"""Map Marker Layer - Imperative Shell.

This module pushes marker descriptors into a concrete map renderer and
provides the static PNG renderer built on OpenStreetMap tiles.
Marker styling is decided in the core module.
"""

import io
import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from PIL import Image, ImageDraw
from staticmap import StaticMap, CircleMarker

from quake_dashboard.core.errors import DashboardError, ErrorCategory
from quake_dashboard.core.markers import MarkerDescriptor, MarkerStyle


logger = logging.getLogger(__name__)


OSM_TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = "© OpenStreetMap contributors"

# Initial world view: (latitude, longitude) and zoom
BASE_CENTER = (20.0, 0.0)
BASE_ZOOM = 2

# Gap between the attribution text and its backing box, in pixels
ATTRIBUTION_PADDING = 3


class MapRenderer(Protocol):
    """Capability boundary for a map library.

    Any renderer (or a test double) exposing these members can be
    reconciled against a descriptor set.
    """

    @property
    def ready(self) -> bool:
        ...

    def clear_markers(self) -> None:
        ...

    def add_marker(
        self,
        position: tuple[float, float],
        style: MarkerStyle,
        popup_html: str,
    ) -> None:
        ...


@dataclass
class ReconcileResult:
    """Result of synchronizing a renderer's marker layer.

    Attributes:
        success: Whether the layer now matches the descriptors
        markers_added: Number of markers added before success or failure
        error: Render-category error if failed
    """
    success: bool
    markers_added: int = 0
    error: DashboardError | None = None


def _render_failure(message: str, markers_added: int = 0) -> ReconcileResult:
    return ReconcileResult(
        success=False,
        markers_added=markers_added,
        error=DashboardError(category=ErrorCategory.RENDER, message=message),
    )


def reconcile(
    renderer: MapRenderer,
    descriptors: Sequence[MarkerDescriptor],
) -> ReconcileResult:
    """Replace the renderer's markers with exactly the given descriptors.

    Full replace: the layer is cleared, then one marker is added per
    descriptor in order. Renderer exceptions are reported as a render
    failure and never propagate.

    Args:
        renderer: Target map renderer
        descriptors: Marker descriptors from the core projector

    Returns:
        ReconcileResult indicating success or failure
    """
    if not renderer.ready:
        logger.warning("Map renderer not ready, skipping marker reconcile")
        return _render_failure("Map is not ready yet")

    added = 0
    try:
        renderer.clear_markers()
        for descriptor in descriptors:
            renderer.add_marker(
                descriptor.position,
                descriptor.style,
                descriptor.popup_html,
            )
            added += 1
    except Exception as e:
        logger.error("Failed to update map markers after %d added: %s", added, str(e))
        return _render_failure(f"Failed to update map markers: {e}", added)

    logger.debug("Map layer reconciled with %d markers", added)
    return ReconcileResult(success=True, markers_added=added)


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


def draw_attribution(image: Image.Image, text: str = OSM_ATTRIBUTION) -> None:
    """Stamp the tile attribution into the bottom-right corner of an image."""
    draw = ImageDraw.Draw(image)
    left, top, right, bottom = draw.textbbox((0, 0), text)
    box_width = right - left + 2 * ATTRIBUTION_PADDING
    box_height = bottom - top + 2 * ATTRIBUTION_PADDING

    x = image.width - box_width
    y = image.height - box_height
    draw.rectangle((x, y, image.width, image.height), fill="white")
    draw.text(
        (x + ATTRIBUTION_PADDING - left, y + ATTRIBUTION_PADDING - top),
        text,
        fill="black",
    )


class StaticMapRenderer:
    """Renders markers onto a static PNG world map.

    This is part of the imperative shell - it handles I/O (fetching map tiles
    and rendering images). Popups cannot be shown on an image; they are kept
    so callers can list them alongside.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 400,
        tile_url: str = OSM_TILE_URL,
    ) -> None:
        """Initialize static map renderer.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            tile_url: Tile URL template
        """
        self.width = width
        self.height = height
        self.tile_url = tile_url
        self.popups: list[str] = []
        self._map: StaticMap | None = None

    @property
    def ready(self) -> bool:
        return self._map is not None

    @property
    def marker_count(self) -> int:
        return len(self.popups)

    def initialize(self) -> bool:
        """Create the underlying map. Safe to call more than once.

        Returns:
            True once the renderer is ready
        """
        if self._map is not None:
            return True

        try:
            self._map = StaticMap(
                self.width,
                self.height,
                url_template=self.tile_url,
            )
        except Exception as e:
            logger.error("Failed to initialize static map: %s", str(e))
            return False

        return True

    def clear_markers(self) -> None:
        self._require_map().markers.clear()
        self.popups.clear()

    def add_marker(
        self,
        position: tuple[float, float],
        style: MarkerStyle,
        popup_html: str,
    ) -> None:
        static_map = self._require_map()
        latitude, longitude = position

        # White ring drawn first so it renders behind the fill
        static_map.add_marker(CircleMarker(
            (longitude, latitude),  # (lon, lat) order for staticmap
            "white",
            style.radius_px + 1,
        ))
        static_map.add_marker(CircleMarker(
            (longitude, latitude),
            style.color,
            style.radius_px,
        ))
        self.popups.append(popup_html)

    def render_png(self) -> MapImageResult:
        """Render the current markers over the base world view.

        This method performs I/O (fetches map tiles from tile server).

        Returns:
            MapImageResult with image bytes or error
        """
        if self._map is None:
            return MapImageResult(success=False, error="Map is not ready yet")

        logger.info("Rendering static map with %d markers", self.marker_count)

        try:
            latitude, longitude = BASE_CENTER
            image = self._map.render(zoom=BASE_ZOOM, center=(longitude, latitude))
            draw_attribution(image)

            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            image_bytes = buffer.getvalue()

            logger.info("Generated map image: %d bytes", len(image_bytes))

            return MapImageResult(success=True, image_bytes=image_bytes)

        except Exception as e:
            logger.error("Failed to render map: %s", str(e))
            return MapImageResult(success=False, error=str(e))

    def _require_map(self) -> StaticMap:
        if self._map is None:
            raise RuntimeError("Static map renderer used before initialize()")
        return self._map
