"""Application Entry Point.

Loads configuration, wires the feed client and dashboard, and serves the
API with uvicorn.
"""

import argparse
import logging
import os

import uvicorn
from fastapi import FastAPI

from quake_dashboard.api import create_app
from quake_dashboard.core.config import Config, validate_config
from quake_dashboard.core.view import FilterParameters
from quake_dashboard.dashboard import Dashboard
from quake_dashboard.shell.config_loader import load_config, load_config_from_env
from quake_dashboard.shell.feed_client import FeedClient
from quake_dashboard.shell.map_layer import StaticMapRenderer


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("FEED_URL"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def build_app(config: Config | None = None) -> FastAPI:
    """Build the dashboard app from configuration.

    Raises:
        ValueError: If the configuration has critical errors
    """
    config = config or _get_config()

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config warning in %s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config error in %s: %s", error.field, error.message)
        raise ValueError("Invalid configuration")

    feed_client = FeedClient(
        feed_url=config.feed_url,
        timeout=config.request_timeout_seconds,
    )
    dashboard = Dashboard(
        feed_client,
        params=FilterParameters(
            min_magnitude=config.default_min_magnitude,
            time_window=config.default_time_window,
        ),
    )

    if config.fetch_on_startup:
        dashboard.refresh()
        if dashboard.feed_error:
            logger.warning("Initial fetch failed: %s", dashboard.feed_error.message)

    return create_app(
        dashboard,
        static_renderer_factory=lambda: StaticMapRenderer(config.map_width, config.map_height),
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the earthquake dashboard")
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")))
    args = parser.parse_args()

    app = build_app()
    logger.info("Serving dashboard on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
