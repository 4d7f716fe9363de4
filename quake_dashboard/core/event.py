"""Seismic event model and feed parsing - Pure functions.

This module flattens the USGS GeoJSON summary feed into typed SeismicEvent
objects. All functions are pure with no side effects.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeismicEvent:
    """Immutable seismic event.

    Attributes:
        id: Opaque feed identifier
        magnitude: Event magnitude, None if the feed omitted it
        place: Human-readable location description
        occurred_at_millis: Event time in epoch milliseconds (UTC)
        longitude: Epicenter longitude, NaN if missing
        latitude: Epicenter latitude, NaN if missing
        depth_km: Depth in kilometers, None if missing
        url: USGS event page URL
        title: Feed-provided title
        mag_type: Magnitude type (e.g., 'ml', 'md', 'mb')
        tsunami: Whether the tsunami flag was set
    """
    id: str
    magnitude: float | None
    place: str
    occurred_at_millis: int
    longitude: float
    latitude: float
    depth_km: float | None = None
    url: str = ""
    title: str = ""
    mag_type: str | None = None
    tsunami: bool = False

    @property
    def occurred_at(self) -> datetime:
        """Event time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.occurred_at_millis / 1000, tz=timezone.utc)

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)

    @property
    def is_mappable(self) -> bool:
        """True if magnitude, latitude and longitude are all finite."""
        return (
            _is_finite(self.magnitude)
            and _is_finite(self.latitude)
            and _is_finite(self.longitude)
        )


def _is_finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _to_float(value: Any, default: float | None) -> float | None:
    """Coerce a feed value to float, falling back to default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _is_representable_time(time_ms: float) -> bool:
    """True if epoch millis fit in a datetime."""
    if not math.isfinite(time_ms):
        return False
    try:
        datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc)
    except (OverflowError, ValueError, OSError):
        return False
    return True


def parse_event(feature: Any) -> SeismicEvent | None:
    """Parse a single GeoJSON feature into a SeismicEvent.

    Pure function. Missing coordinates become NaN so the event still counts
    in statistics but never reaches the map, and a NaN or infinite magnitude
    is treated as absent. A feature without a usable event time (missing, or
    outside the range a datetime can hold) cannot be placed in a time window
    and is rejected.

    Args:
        feature: GeoJSON feature dict from the summary feed

    Returns:
        SeismicEvent or None if the feature is unusable
    """
    if not isinstance(feature, dict):
        return None

    props = feature.get("properties") or {}
    geometry = feature.get("geometry") or {}
    if not isinstance(props, dict) or not isinstance(geometry, dict):
        return None

    time_ms = _to_float(props.get("time"), None)
    if time_ms is None or not _is_representable_time(time_ms):
        return None

    coords = geometry.get("coordinates") or []
    if not isinstance(coords, (list, tuple)):
        coords = []

    longitude = _to_float(coords[0], math.nan) if len(coords) > 0 else math.nan
    latitude = _to_float(coords[1], math.nan) if len(coords) > 1 else math.nan
    depth = _to_float(coords[2], None) if len(coords) > 2 else None

    magnitude = _to_float(props.get("mag"), None)
    if magnitude is not None and not math.isfinite(magnitude):
        magnitude = None

    return SeismicEvent(
        id=str(feature.get("id", "")),
        magnitude=magnitude,
        place=props.get("place") or "Unknown location",
        occurred_at_millis=int(time_ms),
        longitude=longitude,
        latitude=latitude,
        depth_km=depth,
        url=props.get("url") or "",
        title=props.get("title") or "",
        mag_type=props.get("magType"),
        tsunami=bool(props.get("tsunami", 0)),
    )


def parse_feed(document: dict[str, Any]) -> list[SeismicEvent]:
    """Parse a GeoJSON FeatureCollection into a list of events.

    Pure function. Unlike a query API response, the summary feed order is
    meaningful (it breaks ties in the significant-events ranking), so it is
    preserved as-is.

    Args:
        document: Decoded FeatureCollection

    Returns:
        Parsed events in feed order, unusable features skipped
    """
    features = document.get("features") or []
    events = []

    for index, feature in enumerate(features):
        event = parse_event(feature)
        if event is None:
            logger.debug("Skipping unusable feature at index %d", index)
            continue
        events.append(event)

    return events


def is_feature_collection(document: Any) -> bool:
    """Check that a decoded body has the shape of a feature collection."""
    return isinstance(document, dict) and isinstance(document.get("features"), list)
