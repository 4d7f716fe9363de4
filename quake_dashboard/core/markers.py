"""Map marker projection - Pure functions.

This module turns filtered events into marker descriptors. Pushing the
descriptors into an actual map is handled by the shell layer.
"""

import html
import math
from dataclasses import dataclass
from typing import Sequence

from quake_dashboard.core.event import SeismicEvent
from quake_dashboard.core.scale import (
    SeverityClass,
    classify_magnitude,
    format_event_time,
)


@dataclass(frozen=True)
class MarkerStyle:
    """Visual style handed to a map renderer.

    Attributes:
        color: Hex fill color
        radius_px: Circle radius in pixels
    """
    color: str
    radius_px: int


@dataclass(frozen=True)
class MarkerDescriptor:
    """One map marker for one event.

    Attributes:
        event_id: Source event ID
        position: (latitude, longitude)
        severity: Magnitude class
        radius_px: Circle radius in pixels
        popup_html: Popup content
    """
    event_id: str
    position: tuple[float, float]
    severity: SeverityClass
    radius_px: int
    popup_html: str

    @property
    def color(self) -> str:
        return self.severity.color

    @property
    def style(self) -> MarkerStyle:
        return MarkerStyle(color=self.color, radius_px=self.radius_px)


def format_popup(event: SeismicEvent) -> str:
    """Build the popup HTML for an event.

    Pure function. The place text comes from the feed and is escaped.
    """
    if event.depth_km is None or not math.isfinite(event.depth_km):
        depth = "Depth: unknown"
    else:
        depth = f"Depth: {abs(event.depth_km):g} km"

    return (
        '<div class="quake-popup">'
        f"<h3>M{event.magnitude:.1f} Earthquake</h3>"
        f"<p>{html.escape(event.place)}</p>"
        f"<p>{format_event_time(event.occurred_at_millis)}</p>"
        f"<p>{depth}</p>"
        "</div>"
    )


def describe_event(event: SeismicEvent) -> MarkerDescriptor:
    """Create the marker descriptor for a mappable event.

    Pure function.
    """
    severity = classify_magnitude(event.magnitude)
    return MarkerDescriptor(
        event_id=event.id,
        position=(event.latitude, event.longitude),
        severity=severity,
        radius_px=severity.radius_px,
        popup_html=format_popup(event),
    )


def project_markers(events: Sequence[SeismicEvent]) -> list[MarkerDescriptor]:
    """Project events onto marker descriptors, preserving order.

    Pure function. Events without a finite magnitude or position are left
    off the map without error.

    Args:
        events: Filtered events

    Returns:
        One descriptor per mappable event
    """
    return [describe_event(e) for e in events if e.is_mappable]
