"""Magnitude scale and display formatting - Pure functions.

Severity classes drive both the map marker style and the list badges.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from quake_dashboard.core.view import TimeWindow


# Minimum-magnitude control range
MIN_MAGNITUDE_CONTROL_MAX = 8.0
MIN_MAGNITUDE_CONTROL_STEP = 0.5


class SeverityClass(str, Enum):
    """Magnitude buckets, most severe first."""
    MAJOR = "major"
    MODERATE = "moderate"
    LIGHT = "light"
    MINOR = "minor"
    MICRO = "micro"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def color(self) -> str:
        return _STYLE[self][0]

    @property
    def radius_px(self) -> int:
        return _STYLE[self][1]


# (hex color, marker radius in pixels)
_STYLE: dict[SeverityClass, tuple[str, int]] = {
    SeverityClass.MAJOR: ("#dc2626", 15),  # red-600
    SeverityClass.MODERATE: ("#f97316", 12),  # orange-500
    SeverityClass.LIGHT: ("#eab308", 9),  # yellow-500
    SeverityClass.MINOR: ("#3b82f6", 7),  # blue-500
    SeverityClass.MICRO: ("#22c55e", 5),  # green-500
}


@dataclass(frozen=True)
class ScaleEntry:
    """One row of the magnitude legend."""
    severity: SeverityClass
    range_text: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {
            "label": self.severity.label,
            "color": self.severity.color,
            "range": self.range_text,
            "description": self.description,
        }


MAGNITUDE_SCALE: tuple[ScaleEntry, ...] = (
    ScaleEntry(SeverityClass.MICRO, "<1.0", "Usually not felt"),
    ScaleEntry(SeverityClass.MINOR, "1.0-2.9", "Rarely felt"),
    ScaleEntry(SeverityClass.LIGHT, "3.0-4.9", "Often felt"),
    ScaleEntry(SeverityClass.MODERATE, "5.0-6.9", "Damaging"),
    ScaleEntry(SeverityClass.MAJOR, "7.0+", "Serious damage"),
)

TIME_WINDOW_LABELS: dict[TimeWindow, str] = {
    TimeWindow.ALL: "All Time",
    TimeWindow.LAST_HOUR: "Last Hour",
    TimeWindow.LAST_6_HOURS: "Last 6 Hours",
    TimeWindow.LAST_12_HOURS: "Last 12 Hours",
}


def classify_magnitude(magnitude: float) -> SeverityClass:
    """Map a magnitude to its severity class.

    Pure function. Each tier includes its lower bound.
    """
    if magnitude >= 7.0:
        return SeverityClass.MAJOR
    elif magnitude >= 5.0:
        return SeverityClass.MODERATE
    elif magnitude >= 3.0:
        return SeverityClass.LIGHT
    elif magnitude >= 1.0:
        return SeverityClass.MINOR
    return SeverityClass.MICRO


def severity_label(magnitude: float | None) -> str:
    """Human-readable severity label ("Major" ... "Micro")."""
    return classify_magnitude(magnitude if magnitude is not None else 0.0).label


def format_magnitude(magnitude: float | None) -> str:
    """Format a magnitude with one decimal."""
    if magnitude is None:
        return "0.0"
    return f"{magnitude:.1f}"


def format_min_magnitude_label(min_magnitude: float) -> str:
    """Caption for the total-count card."""
    if min_magnitude > 0:
        return f"Magnitude {min_magnitude:g}+"
    return "All magnitudes"


def format_event_time(occurred_at_millis: int) -> str:
    """Format epoch milliseconds as a UTC timestamp string."""
    moment = datetime.fromtimestamp(occurred_at_millis / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def validate_min_magnitude_control(value: float) -> float:
    """Validate a minimum-magnitude control value.

    The control is a slider from 0 to 8 in steps of 0.5.

    Raises:
        ValueError: If the value is out of range or off the step grid
    """
    value = float(value)
    if not math.isfinite(value) or not 0 <= value <= MIN_MAGNITUDE_CONTROL_MAX:
        raise ValueError(
            f"Minimum magnitude must be between 0 and {MIN_MAGNITUDE_CONTROL_MAX:g}, got {value}"
        )

    steps = value / MIN_MAGNITUDE_CONTROL_STEP
    if steps != round(steps):
        raise ValueError(
            f"Minimum magnitude must be a multiple of {MIN_MAGNITUDE_CONTROL_STEP}, got {value}"
        )

    return value
