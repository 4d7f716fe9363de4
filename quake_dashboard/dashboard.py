"""Dashboard - Wires Functional Core and Imperative Shell.

This module owns the dashboard's mutable state (current events, filters,
loading flag, errors) and recomputes derived state through the pure core
whenever an input changes.

Dashboard is not thread-safe. It must only be mutated from one thread;
a fetch run elsewhere hands its FetchResult back via complete_refresh().
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from quake_dashboard.core.errors import DashboardError, ErrorCategory
from quake_dashboard.core.event import SeismicEvent
from quake_dashboard.core.markers import MarkerDescriptor, project_markers
from quake_dashboard.core.scale import (
    TIME_WINDOW_LABELS,
    format_event_time,
    format_magnitude,
    format_min_magnitude_label,
    severity_label,
    classify_magnitude,
    validate_min_magnitude_control,
)
from quake_dashboard.core.view import (
    DashboardView,
    FilterParameters,
    TimeWindow,
    compute_view,
    current_time_millis,
)
from quake_dashboard.shell.feed_client import FeedClient, FetchResult
from quake_dashboard.shell.map_layer import MapRenderer, ReconcileResult, reconcile


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshTicket:
    """Handle for one in-flight refresh.

    Attributes:
        sequence: Monotonic request number
    """
    sequence: int


def _finite_or_none(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value


def event_to_dict(event: SeismicEvent) -> dict[str, Any]:
    """Convert an event to API response format."""
    magnitude = _finite_or_none(event.magnitude)
    return {
        "id": event.id,
        "magnitude": magnitude,
        "magnitude_display": format_magnitude(magnitude),
        "severity": severity_label(magnitude),
        "color": classify_magnitude(magnitude if magnitude is not None else 0.0).color,
        "place": event.place,
        "time": event.occurred_at.isoformat(),
        "time_display": format_event_time(event.occurred_at_millis),
        "latitude": _finite_or_none(event.latitude),
        "longitude": _finite_or_none(event.longitude),
        "depth_km": _finite_or_none(event.depth_km),
        "url": event.url,
    }


class Dashboard:
    """Single owner of dashboard state.

    This class wires together:
    - Feed client (fetches the event set)
    - Core functions (filtering, statistics, marker projection)
    - Map renderers (via reconcile)
    """

    def __init__(
        self,
        feed_client: FeedClient,
        params: FilterParameters | None = None,
        clock: Callable[[], int] = current_time_millis,
    ) -> None:
        """Initialize dashboard.

        Args:
            feed_client: Feed client used by refresh()
            params: Initial filter parameters
            clock: Returns the current time in epoch milliseconds
        """
        self.feed_client = feed_client
        self.params = params or FilterParameters()
        self.clock = clock

        self.events: tuple[SeismicEvent, ...] = ()
        self.loading = False
        self.show_filters = False
        self.last_updated: datetime | None = None
        self.feed_error: DashboardError | None = None
        self.render_error: DashboardError | None = None

        self._sequence = 0
        self._view = self._compute()

    @property
    def view(self) -> DashboardView:
        """Filtered events and summary for the current inputs."""
        return self._view

    @property
    def markers(self) -> list[MarkerDescriptor]:
        """Marker descriptors for the current filtered events."""
        return project_markers(self._view.filtered_events)

    def _compute(self) -> DashboardView:
        return compute_view(self.events, self.params, now_millis=self.clock())

    def _recompute(self) -> None:
        self._view = self._compute()
        logger.debug(
            "Recomputed view: %d of %d events",
            self._view.summary.filtered_count,
            len(self.events),
        )

    # ----- Refresh -----

    def begin_refresh(self) -> RefreshTicket | None:
        """Enter the loading state.

        Returns:
            A ticket for complete_refresh(), or None if a refresh is
            already in flight
        """
        if self.loading:
            logger.info("Refresh already in progress, ignoring request")
            return None

        self._sequence += 1
        self.loading = True
        return RefreshTicket(sequence=self._sequence)

    def fetch(self) -> FetchResult:
        """Run the feed request without touching dashboard state.

        Safe to call from a worker thread.
        """
        try:
            return self.feed_client.fetch_events()
        except Exception as e:
            logger.exception("Unexpected error fetching earthquake feed")
            return FetchResult(success=False, error=f"Unexpected error: {e}")

    def complete_refresh(self, ticket: RefreshTicket, result: FetchResult) -> bool:
        """Apply a fetch result.

        Results for any ticket other than the most recent one are discarded,
        so an out-of-order response can never overwrite newer data.

        Returns:
            True if the result was applied
        """
        if ticket.sequence != self._sequence:
            logger.warning(
                "Discarding stale feed response #%d (latest is #%d)",
                ticket.sequence,
                self._sequence,
            )
            return False

        self.loading = False

        if not result.success:
            self.feed_error = result.dashboard_error
            logger.error("Feed refresh failed: %s", result.error)
            return True

        # Wholesale replacement, no merge with the previous event set
        self.events = tuple(result.events)
        self.feed_error = None
        self.last_updated = self.feed_client.last_success_at or datetime.now(timezone.utc)
        self._recompute()

        logger.info("Loaded %d events", len(self.events))
        return True

    def abandon_refresh(self, ticket: RefreshTicket) -> None:
        """Leave the loading state for a fetch that never produced a result.

        Only the latest ticket can be abandoned; the current data and errors
        are left as they were.
        """
        if ticket.sequence != self._sequence or not self.loading:
            return

        self.loading = False
        logger.warning("Feed refresh #%d abandoned", ticket.sequence)

    def refresh(self) -> bool:
        """Fetch the feed and apply the result synchronously.

        Returns:
            False if a refresh was already in flight
        """
        ticket = self.begin_refresh()
        if ticket is None:
            return False

        result = self.fetch()
        return self.complete_refresh(ticket, result)

    # ----- Controls -----

    def set_filters(
        self,
        min_magnitude: float | None = None,
        time_window: TimeWindow | str | None = None,
    ) -> DashboardView:
        """Update one or both filter controls and recompute.

        Raises:
            ValueError: If a control value is invalid
        """
        new_min = self.params.min_magnitude
        if min_magnitude is not None:
            new_min = validate_min_magnitude_control(min_magnitude)

        new_window = self.params.time_window
        if time_window is not None:
            new_window = TimeWindow(time_window)

        self.params = FilterParameters(min_magnitude=new_min, time_window=new_window)
        self._recompute()

        logger.info(
            "Filters set: min magnitude %s, window %s",
            self.params.min_magnitude,
            self.params.time_window.value,
        )
        return self._view

    def toggle_filters(self) -> bool:
        """Flip filter-panel visibility."""
        self.show_filters = not self.show_filters
        return self.show_filters

    def dismiss_error(self) -> None:
        """Dismiss the active feed error, revealing the last loaded data."""
        self.feed_error = None

    # ----- Map -----

    def sync_map(self, renderer: MapRenderer) -> ReconcileResult:
        """Push current markers into a renderer.

        A failure here only affects the map panel.
        """
        result = reconcile(renderer, self.markers)
        self.render_error = result.error
        return result

    def report_render_error(self, message: str) -> None:
        """Record a map failure raised outside of reconcile."""
        self.render_error = DashboardError(category=ErrorCategory.RENDER, message=message)

    # ----- Snapshot -----

    @property
    def status(self) -> str:
        if self.feed_error is not None:
            return "error"
        if self.loading:
            return "loading"
        return "ready"

    def snapshot(self) -> dict[str, Any]:
        """Serialize the dashboard for the API.

        While a feed error is active the statistics and list panels are
        withheld, so stale data is never shown as if the last load worked.
        """
        summary = self._view.summary
        showing_data = self.feed_error is None

        return {
            "status": self.status,
            "loading": self.loading,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "filters": {
                "min_magnitude": self.params.min_magnitude,
                "time_window": self.params.time_window.value,
                "label": format_min_magnitude_label(self.params.min_magnitude),
                "time_window_label": TIME_WINDOW_LABELS[self.params.time_window],
            },
            "show_filters": self.show_filters,
            "summary": {
                "filtered_count": summary.filtered_count,
                "significant_count": summary.significant_count,
                "max_magnitude": summary.max_magnitude,
                "max_magnitude_display": format_magnitude(summary.max_magnitude),
                "mean_magnitude": summary.mean_magnitude,
                "mean_magnitude_display": format_magnitude(summary.mean_magnitude),
            } if showing_data else None,
            "top_significant": [
                event_to_dict(e) for e in summary.top_significant
            ] if showing_data else None,
            "marker_count": len(self.markers) if showing_data else None,
            "errors": {
                "feed": self.feed_error.to_dict() if self.feed_error else None,
                "render": self.render_error.to_dict() if self.render_error else None,
            },
            "retry_available": self.feed_error is not None or self.render_error is not None,
        }
