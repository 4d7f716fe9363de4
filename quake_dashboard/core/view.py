"""Filter engine - Pure functions.

This module turns the current event set and the user's filter controls into
the filtered subset plus the derived statistics shown on the dashboard.
All functions are pure with no side effects.
"""

import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

from quake_dashboard.core.event import SeismicEvent


# Magnitude at which an event counts as significant (inclusive)
SIGNIFICANT_MAGNITUDE = 2.5

# Maximum number of events in the significant-events list
TOP_SIGNIFICANT_LIMIT = 5

HOUR_MILLIS = 60 * 60 * 1000


class TimeWindow(str, Enum):
    """Time window selector values."""
    ALL = "all"
    LAST_HOUR = "1h"
    LAST_6_HOURS = "6h"
    LAST_12_HOURS = "12h"

    @property
    def window_millis(self) -> int | None:
        """Window length in milliseconds, None for no time filtering."""
        return _WINDOW_MILLIS[self]


_WINDOW_MILLIS: dict[TimeWindow, int | None] = {
    TimeWindow.ALL: None,
    TimeWindow.LAST_HOUR: HOUR_MILLIS,
    TimeWindow.LAST_6_HOURS: 6 * HOUR_MILLIS,
    TimeWindow.LAST_12_HOURS: 12 * HOUR_MILLIS,
}


@dataclass(frozen=True)
class FilterParameters:
    """User-selected filters.

    Attributes:
        min_magnitude: Minimum magnitude (inclusive), 0 disables the filter
        time_window: How far back from now to keep events
    """
    min_magnitude: float = 0.0
    time_window: TimeWindow = TimeWindow.ALL

    def __post_init__(self) -> None:
        if not math.isfinite(self.min_magnitude) or self.min_magnitude < 0:
            raise ValueError(
                f"min_magnitude must be a finite number >= 0, got {self.min_magnitude}"
            )
        # Accept the raw selector value ("6h") as well as the enum member
        object.__setattr__(self, "time_window", TimeWindow(self.time_window))


@dataclass(frozen=True)
class DerivedSummary:
    """Statistics over the filtered event set.

    Attributes:
        filtered_count: Number of events passing the filters
        significant_count: Filtered events with magnitude >= 2.5
        max_magnitude: Largest magnitude, 0.0 when empty
        mean_magnitude: Average magnitude, 0.0 when empty
        top_significant: Up to 5 significant events, strongest first
    """
    filtered_count: int
    significant_count: int
    max_magnitude: float
    mean_magnitude: float
    top_significant: tuple[SeismicEvent, ...]


@dataclass(frozen=True)
class DashboardView:
    """Filtered events with their summary."""
    filtered_events: tuple[SeismicEvent, ...]
    summary: DerivedSummary

    def __iter__(self) -> Iterator:
        # Allows `events, summary = compute_view(...)`
        return iter((self.filtered_events, self.summary))


def current_time_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def matches_magnitude(event: SeismicEvent, min_magnitude: float) -> bool:
    """Check the magnitude predicate.

    Pure function. A zero threshold disables the predicate, so events with
    no magnitude pass; any positive threshold excludes them.
    """
    if min_magnitude == 0:
        return True

    if event.magnitude is None:
        return False

    return event.magnitude >= min_magnitude


def matches_time_window(event: SeismicEvent, window: TimeWindow, now_millis: int) -> bool:
    """Check the time-window predicate (inclusive at the boundary).

    Pure function.
    """
    window_millis = window.window_millis
    if window_millis is None:
        return True

    return now_millis - event.occurred_at_millis <= window_millis


def filter_events(
    events: Sequence[SeismicEvent],
    params: FilterParameters,
    now_millis: int,
) -> tuple[SeismicEvent, ...]:
    """Apply both predicates, preserving input order.

    Pure function.
    """
    return tuple(
        e for e in events
        if matches_magnitude(e, params.min_magnitude)
        and matches_time_window(e, params.time_window, now_millis)
    )


def _magnitude_or_none(event: SeismicEvent) -> float | None:
    if event.magnitude is None or not math.isfinite(event.magnitude):
        return None
    return event.magnitude


def is_significant(event: SeismicEvent) -> bool:
    """True if the event reaches the significant threshold."""
    return _magnitude_or_none(event) is not None and event.magnitude >= SIGNIFICANT_MAGNITUDE


def rank_significant(
    events: Sequence[SeismicEvent],
    limit: int = TOP_SIGNIFICANT_LIMIT,
) -> tuple[SeismicEvent, ...]:
    """Select the strongest significant events.

    Pure function. Python's sort is stable, so events of equal magnitude
    keep their feed order.

    Args:
        events: Events in feed order
        limit: Maximum number of events to return

    Returns:
        Significant events sorted by magnitude, descending
    """
    significant = [e for e in events if is_significant(e)]
    significant.sort(key=lambda e: e.magnitude, reverse=True)
    return tuple(significant[:limit])


def summarize(events: Sequence[SeismicEvent]) -> DerivedSummary:
    """Compute statistics over already-filtered events in a single pass.

    Pure function. A missing or non-finite magnitude contributes 0.0 to the
    max and the mean but is never significant.
    """
    count = 0
    significant_count = 0
    max_magnitude = 0.0
    total = 0.0

    for event in events:
        magnitude = _magnitude_or_none(event)
        if magnitude is None:
            magnitude = 0.0
        if count == 0 or magnitude > max_magnitude:
            max_magnitude = magnitude
        total += magnitude
        count += 1
        if is_significant(event):
            significant_count += 1

    return DerivedSummary(
        filtered_count=count,
        significant_count=significant_count,
        max_magnitude=max_magnitude,
        mean_magnitude=total / count if count else 0.0,
        top_significant=rank_significant(events),
    )


def compute_view(
    events: Sequence[SeismicEvent],
    params: FilterParameters,
    now_millis: int | None = None,
) -> DashboardView:
    """Compute the filtered events and their summary.

    Pure function apart from reading the clock once when now_millis is not
    given. Every event in one computation is compared against the same now.

    Args:
        events: Full event set in feed order
        params: Filter parameters
        now_millis: Reference time in epoch milliseconds

    Returns:
        DashboardView with the filtered events and DerivedSummary
    """
    if now_millis is None:
        now_millis = current_time_millis()

    filtered = filter_events(events, params, now_millis)

    return DashboardView(
        filtered_events=filtered,
        summary=summarize(filtered),
    )
