"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Feed parsing into seismic events
- Magnitude/time filtering and summary statistics
- Magnitude classification and display formatting
- Map marker projection

All functions here are deterministic and have no I/O.
"""

from quake_dashboard.core.event import SeismicEvent, parse_event, parse_feed
from quake_dashboard.core.view import (
    DashboardView,
    DerivedSummary,
    FilterParameters,
    TimeWindow,
    compute_view,
)
from quake_dashboard.core.scale import SeverityClass, classify_magnitude, severity_label
from quake_dashboard.core.markers import MarkerDescriptor, MarkerStyle, project_markers
from quake_dashboard.core.errors import DashboardError, ErrorCategory

__all__ = [
    # Event
    "SeismicEvent",
    "parse_event",
    "parse_feed",
    # View
    "DashboardView",
    "DerivedSummary",
    "FilterParameters",
    "TimeWindow",
    "compute_view",
    # Scale
    "SeverityClass",
    "classify_magnitude",
    "severity_label",
    # Markers
    "MarkerDescriptor",
    "MarkerStyle",
    "project_markers",
    # Errors
    "DashboardError",
    "ErrorCategory",
]
