"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

import math
from dataclasses import dataclass, field

from quake_dashboard.core.view import TimeWindow


# USGS summary feed: all earthquakes, past day
DEFAULT_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_url: GeoJSON summary feed URL
        request_timeout_seconds: Feed request timeout
        map_width: Static map image width in pixels
        map_height: Static map image height in pixels
        default_min_magnitude: Initial minimum-magnitude filter
        default_time_window: Initial time-window selector value
        fetch_on_startup: Fetch the feed once when the app starts
    """
    feed_url: str = DEFAULT_FEED_URL
    request_timeout_seconds: int = 30
    map_width: int = 800
    map_height: int = 400
    default_min_magnitude: float = 0.0
    default_time_window: str = TimeWindow.ALL.value
    fetch_on_startup: bool = True


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.feed_url.startswith("${"):
        errors.append(ValidationError(
            field="feed_url",
            message="Feed URL not resolved (still contains placeholder)",
        ))
    elif not config.feed_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="feed_url",
            message=f"Feed URL must be http(s), got '{config.feed_url}'",
        ))
    elif config.feed_url.startswith("http://"):
        errors.append(ValidationError(
            field="feed_url",
            message="Feed URL is not using HTTPS",
            severity="warning",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Timeout must be positive, got {config.request_timeout_seconds}",
        ))

    for name in ("map_width", "map_height"):
        value = getattr(config, name)
        if value <= 0:
            errors.append(ValidationError(
                field=name,
                message=f"Map dimension must be positive, got {value}",
            ))

    if not math.isfinite(config.default_min_magnitude) or config.default_min_magnitude < 0:
        errors.append(ValidationError(
            field="default_min_magnitude",
            message=f"Minimum magnitude must be >= 0, got {config.default_min_magnitude}",
        ))

    valid_windows = {w.value for w in TimeWindow}
    if config.default_time_window not in valid_windows:
        errors.append(ValidationError(
            field="default_time_window",
            message=(
                f"Unknown time window '{config.default_time_window}', "
                f"expected one of {sorted(valid_windows)}"
            ),
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
