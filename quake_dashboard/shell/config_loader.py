"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in quake_dashboard/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quake_dashboard.core.config import Config, DEFAULT_FEED_URL


logger = logging.getLogger(__name__)


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place so validation can flag it.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_bool(value: Any) -> bool:
    """Parse a boolean that may arrive as a string."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    data = {key: _resolve_value(value) for key, value in data.items()}
    defaults = Config()

    map_data = data.get("map") or {}

    return Config(
        feed_url=data.get("feed_url", DEFAULT_FEED_URL),
        request_timeout_seconds=int(
            data.get("request_timeout_seconds", defaults.request_timeout_seconds)
        ),
        map_width=int(_resolve_value(map_data.get("width", defaults.map_width))),
        map_height=int(_resolve_value(map_data.get("height", defaults.map_height))),
        default_min_magnitude=float(
            data.get("default_min_magnitude", defaults.default_min_magnitude)
        ),
        default_time_window=str(
            data.get("default_time_window", defaults.default_time_window)
        ),
        fetch_on_startup=_parse_bool(
            data.get("fetch_on_startup", defaults.fetch_on_startup)
        ),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: feed %s, timeout %ds",
        config.feed_url,
        config.request_timeout_seconds,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        FEED_URL: GeoJSON summary feed URL
        REQUEST_TIMEOUT: Feed request timeout in seconds
        DEFAULT_MIN_MAGNITUDE: Initial minimum-magnitude filter
        DEFAULT_TIME_WINDOW: Initial time window (all, 1h, 6h, 12h)
        FETCH_ON_STARTUP: Fetch the feed when the app starts

    Returns:
        Config object from environment
    """
    defaults = Config()

    return Config(
        feed_url=os.environ.get("FEED_URL", DEFAULT_FEED_URL),
        request_timeout_seconds=int(
            os.environ.get("REQUEST_TIMEOUT", defaults.request_timeout_seconds)
        ),
        default_min_magnitude=float(
            os.environ.get("DEFAULT_MIN_MAGNITUDE", defaults.default_min_magnitude)
        ),
        default_time_window=os.environ.get(
            "DEFAULT_TIME_WINDOW", defaults.default_time_window
        ),
        fetch_on_startup=_parse_bool(
            os.environ.get("FETCH_ON_STARTUP", defaults.fetch_on_startup)
        ),
    )
