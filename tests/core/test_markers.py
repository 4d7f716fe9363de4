"""Tests for marker projection - Pure functions."""

import math

import pytest

from quake_dashboard.core.event import SeismicEvent
from quake_dashboard.core.markers import (
    MarkerDescriptor,
    MarkerStyle,
    describe_event,
    format_popup,
    project_markers,
)
from quake_dashboard.core.scale import SeverityClass


def make_event(
    event_id: str,
    magnitude: float | None = 4.0,
    latitude: float = 37.78,
    longitude: float = -122.42,
    depth_km: float | None = 10.0,
    place: str = "10km NE of Somewhere",
) -> SeismicEvent:
    return SeismicEvent(
        id=event_id,
        magnitude=magnitude,
        place=place,
        occurred_at_millis=1703001600000,
        longitude=longitude,
        latitude=latitude,
        depth_km=depth_km,
    )


class TestDescribeEvent:
    """Tests for describe_event()."""

    @pytest.mark.parametrize("magnitude, severity, radius", [
        (7.0, SeverityClass.MAJOR, 15),
        (6.99, SeverityClass.MODERATE, 12),
        (5.0, SeverityClass.MODERATE, 12),
        (2.9, SeverityClass.MINOR, 7),
        (3.0, SeverityClass.LIGHT, 9),
        (0.99, SeverityClass.MICRO, 5),
    ])
    def test_classifies_by_magnitude(self, magnitude, severity, radius):
        descriptor = describe_event(make_event("e", magnitude=magnitude))

        assert descriptor.severity is severity
        assert descriptor.radius_px == radius

    def test_position_is_lat_lon(self):
        descriptor = describe_event(make_event("e", latitude=1.5, longitude=-2.5))
        assert descriptor.position == (1.5, -2.5)

    def test_style_carries_color_and_radius(self):
        descriptor = describe_event(make_event("e", magnitude=8.1))
        assert descriptor.style == MarkerStyle(color="#dc2626", radius_px=15)
        assert descriptor.color == "#dc2626"


class TestFormatPopup:
    """Tests for format_popup()."""

    def test_contains_magnitude_place_time_depth(self):
        popup = format_popup(make_event("e", magnitude=4.25, depth_km=-1.5))

        assert "M4.2 Earthquake" in popup
        assert "10km NE of Somewhere" in popup
        assert "2023-12-19 16:00:00 UTC" in popup
        assert "Depth: 1.5 km" in popup

    def test_escapes_place(self):
        popup = format_popup(make_event("e", place="<script>alert(1)</script>"))

        assert "<script>" not in popup
        assert "&lt;script&gt;" in popup

    def test_unknown_depth(self):
        assert "Depth: unknown" in format_popup(make_event("e", depth_km=None))
        assert "Depth: unknown" in format_popup(make_event("e", depth_km=math.nan))


class TestProjectMarkers:
    """Tests for project_markers()."""

    def test_one_marker_per_mappable_event_in_order(self):
        events = [make_event("a", 1.0), make_event("b", 5.0), make_event("c", 3.0)]

        result = project_markers(events)

        assert [d.event_id for d in result] == ["a", "b", "c"]

    def test_excludes_nan_latitude(self):
        """A NaN latitude is dropped even if it passed the filters."""
        events = [make_event("good"), make_event("bad", latitude=math.nan)]

        result = project_markers(events)

        assert [d.event_id for d in result] == ["good"]

    def test_excludes_missing_magnitude(self):
        result = project_markers([make_event("nomag", magnitude=None)])
        assert result == []

    def test_empty_input(self):
        assert project_markers([]) == []


class TestMarkerDescriptor:
    """Tests for MarkerDescriptor dataclass."""

    def test_is_immutable(self):
        descriptor = MarkerDescriptor(
            event_id="e",
            position=(0.0, 0.0),
            severity=SeverityClass.MICRO,
            radius_px=5,
            popup_html="",
        )
        with pytest.raises(AttributeError):
            descriptor.radius_px = 9
