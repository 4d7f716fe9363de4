"""Dashboard API - FastAPI service over the in-memory dashboard.

All endpoints run on the event loop, which is the dashboard's single owning
context. Feed requests and tile fetching are pushed to the threadpool and
their results are applied back here.
"""

import logging
from typing import Callable

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from quake_dashboard.core.scale import MAGNITUDE_SCALE, TIME_WINDOW_LABELS
from quake_dashboard.core.view import TimeWindow
from quake_dashboard.dashboard import Dashboard
from quake_dashboard.shell.folium_renderer import FoliumMapRenderer
from quake_dashboard.shell.map_layer import StaticMapRenderer


logger = logging.getLogger(__name__)


class FilterUpdate(BaseModel):
    min_magnitude: float | None = Field(default=None, ge=0, le=8, multiple_of=0.5)
    time_window: TimeWindow | None = None


def _feed_error_detail(dashboard: Dashboard) -> dict:
    return {
        "error": dashboard.feed_error.to_dict(),
        "retry": "POST /api/refresh",
    }


def create_app(
    dashboard: Dashboard,
    static_renderer_factory: Callable[[], StaticMapRenderer] | None = None,
    folium_renderer_factory: Callable[[], FoliumMapRenderer] | None = None,
) -> FastAPI:
    """Build the FastAPI app around a dashboard.

    A fresh renderer is created per map request so that rendering in the
    threadpool never shares marker state with the event loop.

    Args:
        dashboard: State owner
        static_renderer_factory: Creates PNG renderers
        folium_renderer_factory: Creates HTML renderers

    Returns:
        Configured FastAPI app
    """
    static_renderer_factory = static_renderer_factory or StaticMapRenderer
    folium_renderer_factory = folium_renderer_factory or FoliumMapRenderer

    app = FastAPI(
        title="Earthquake Dashboard",
        description="Filter and map the USGS past-day earthquake feed",
        version="1.0.0",
    )

    def _sync_renderer(renderer) -> None:
        """Initialize and reconcile, raising 503 on render failure."""
        if dashboard.feed_error is not None:
            raise HTTPException(status_code=503, detail=_feed_error_detail(dashboard))

        if not renderer.initialize():
            dashboard.report_render_error("Map library failed to initialize")
            raise HTTPException(status_code=503, detail={
                "error": dashboard.render_error.to_dict(),
            })

        result = dashboard.sync_map(renderer)
        if not result.success:
            raise HTTPException(status_code=503, detail={"error": result.error.to_dict()})

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/api/dashboard")
    async def get_dashboard():
        """Current dashboard snapshot."""
        return dashboard.snapshot()

    @app.post("/api/refresh")
    async def refresh():
        """Fetch the feed once. Rejected while a fetch is in flight."""
        ticket = dashboard.begin_refresh()
        if ticket is None:
            raise HTTPException(status_code=409, detail="Refresh already in progress")

        try:
            result = await run_in_threadpool(dashboard.fetch)
        except BaseException:
            # A cancelled or crashed fetch must not leave the guard set
            dashboard.abandon_refresh(ticket)
            raise
        dashboard.complete_refresh(ticket, result)

        return dashboard.snapshot()

    @app.put("/api/filters")
    async def update_filters(update: FilterUpdate):
        """Change the minimum magnitude and/or the time window."""
        try:
            dashboard.set_filters(
                min_magnitude=update.min_magnitude,
                time_window=update.time_window,
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        return dashboard.snapshot()

    @app.post("/api/filters/toggle")
    async def toggle_filters():
        """Show or hide the filter panel."""
        return {"show_filters": dashboard.toggle_filters()}

    @app.post("/api/errors/dismiss")
    async def dismiss_error():
        """Dismiss the active feed error."""
        dashboard.dismiss_error()
        return dashboard.snapshot()

    @app.get("/api/scale")
    async def get_scale():
        """Magnitude legend and time-window options."""
        return {
            "scale": [entry.to_dict() for entry in MAGNITUDE_SCALE],
            "time_windows": [
                {"value": window.value, "label": label}
                for window, label in TIME_WINDOW_LABELS.items()
            ],
        }

    @app.get("/map.png")
    async def get_static_map():
        """Static PNG map of the current markers."""
        renderer = static_renderer_factory()
        _sync_renderer(renderer)

        image = await run_in_threadpool(renderer.render_png)
        if not image.success:
            dashboard.report_render_error(f"Failed to render map: {image.error}")
            raise HTTPException(status_code=503, detail={
                "error": dashboard.render_error.to_dict(),
            })

        return Response(content=image.image_bytes, media_type="image/png")

    @app.get("/map", response_class=HTMLResponse)
    async def get_interactive_map():
        """Interactive Leaflet map of the current markers."""
        renderer = folium_renderer_factory()
        _sync_renderer(renderer)

        try:
            html = renderer.render_html()
        except Exception as e:
            logger.exception("Failed to render interactive map")
            dashboard.report_render_error(f"Failed to render map: {e}")
            raise HTTPException(status_code=503, detail={
                "error": dashboard.render_error.to_dict(),
            })

        return HTMLResponse(content=html)

    return app
