"""Tests for the dashboard HTTP API.

Uses FastAPI's TestClient with a mocked feed client and map renderers.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from quake_dashboard.api import create_app
from quake_dashboard.core.event import SeismicEvent, parse_feed
from quake_dashboard.dashboard import Dashboard
from quake_dashboard.shell.feed_client import FetchResult
from quake_dashboard.shell.map_layer import MapImageResult


NOW = 1_700_000_000_000


def make_event(event_id: str, magnitude: float, place: str = "Somewhere") -> SeismicEvent:
    return SeismicEvent(
        id=event_id,
        magnitude=magnitude,
        place=place,
        occurred_at_millis=NOW,
        longitude=170.25,
        latitude=-20.5,
        depth_km=10.0,
    )


FEED_EVENTS = [
    make_event("a", 1.2),
    make_event("b", 3.4),
    make_event("c", 8.1, place="Test Zone"),
]


def make_static_renderer(image: MapImageResult | None = None, initialized: bool = True) -> Mock:
    renderer = Mock()
    renderer.ready = initialized
    renderer.initialize.return_value = initialized
    renderer.render_png.return_value = image or MapImageResult(
        success=True, image_bytes=b"\x89PNG fake"
    )
    return renderer


@pytest.fixture
def feed_client():
    client = Mock()
    client.fetch_events.return_value = FetchResult(
        success=True, events=list(FEED_EVENTS), status_code=200
    )
    client.last_success_at = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    return client


@pytest.fixture
def dashboard(feed_client):
    return Dashboard(feed_client, clock=lambda: NOW)


@pytest.fixture
def static_renderer():
    return make_static_renderer()


@pytest.fixture
def client(dashboard, static_renderer):
    app = create_app(dashboard, static_renderer_factory=lambda: static_renderer)
    return TestClient(app)


class TestHealthAndScale:
    """Tests for static endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_scale(self, client):
        data = client.get("/api/scale").json()

        assert [row["label"] for row in data["scale"]] == [
            "Micro", "Minor", "Light", "Moderate", "Major",
        ]
        assert data["scale"][-1]["color"] == "#dc2626"
        assert [w["value"] for w in data["time_windows"]] == ["all", "1h", "6h", "12h"]


class TestDashboardEndpoints:
    """Tests for state endpoints."""

    def test_initial_dashboard_is_empty(self, client):
        data = client.get("/api/dashboard").json()

        assert data["status"] == "ready"
        assert data["summary"]["filtered_count"] == 0
        assert data["last_updated"] is None

    def test_refresh_loads_feed(self, client, feed_client):
        response = client.post("/api/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["filtered_count"] == 3
        assert data["summary"]["significant_count"] == 2
        assert data["summary"]["max_magnitude"] == 8.1
        assert data["top_significant"][0]["place"] == "Test Zone"
        assert data["loading"] is False
        feed_client.fetch_events.assert_called_once()

    def test_refresh_rejected_while_in_flight(self, client, dashboard, feed_client):
        dashboard.begin_refresh()

        response = client.post("/api/refresh")

        assert response.status_code == 409
        feed_client.fetch_events.assert_not_called()

    def test_crashed_fetch_releases_refresh_guard(self, client, dashboard):
        dashboard.fetch = Mock(side_effect=[
            RuntimeError("worker died"),
            FetchResult(success=True, events=list(FEED_EVENTS), status_code=200),
        ])

        with pytest.raises(RuntimeError):
            client.post("/api/refresh")

        assert dashboard.loading is False
        response = client.post("/api/refresh")
        assert response.status_code == 200
        assert response.json()["summary"]["filtered_count"] == 3

    def test_bad_feed_values_do_not_break_snapshot(self, client, feed_client):
        """NaN magnitudes and out-of-range times are dropped or neutralized."""
        feed_client.fetch_events.return_value = FetchResult(
            success=True,
            status_code=200,
            events=parse_feed({"features": [
                {"id": "nan", "properties": {"mag": float("nan"), "time": NOW},
                 "geometry": {"coordinates": [1.0, 2.0, 3.0]}},
                {"id": "far", "properties": {"mag": 3.0, "time": 1e18},
                 "geometry": {"coordinates": [1.0, 2.0, 3.0]}},
                {"id": "ok", "properties": {"mag": 4.0, "time": NOW},
                 "geometry": {"coordinates": [1.0, 2.0, 3.0]}},
            ]}),
        )
        client.post("/api/refresh")

        response = client.get("/api/dashboard")

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["filtered_count"] == 2
        assert summary["max_magnitude"] == 4.0
        assert summary["mean_magnitude"] == 2.0
        assert response.json()["marker_count"] == 1

    def test_refresh_failure_reports_feed_error(self, client, feed_client):
        feed_client.fetch_events.return_value = FetchResult(
            success=False, status_code=500, error="HTTP error! status: 500"
        )

        data = client.post("/api/refresh").json()

        assert data["status"] == "error"
        assert data["summary"] is None
        assert data["errors"]["feed"]["message"] == "HTTP error! status: 500"
        assert data["retry_available"] is True

    def test_update_filters(self, client):
        client.post("/api/refresh")

        response = client.put("/api/filters", json={"min_magnitude": 5})

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["filtered_count"] == 1
        assert data["filters"]["label"] == "Magnitude 5+"
        assert data["marker_count"] == 1

    def test_update_time_window(self, client):
        response = client.put("/api/filters", json={"time_window": "12h"})

        assert response.status_code == 200
        assert response.json()["filters"]["time_window"] == "12h"
        assert response.json()["filters"]["time_window_label"] == "Last 12 Hours"

    @pytest.mark.parametrize("body", [
        {"min_magnitude": 3.3},
        {"min_magnitude": 9},
        {"min_magnitude": -1},
        {"time_window": "24h"},
    ])
    def test_invalid_filters_rejected(self, client, body):
        response = client.put("/api/filters", json=body)

        assert response.status_code == 422

    def test_toggle_filters(self, client):
        assert client.post("/api/filters/toggle").json() == {"show_filters": True}
        assert client.post("/api/filters/toggle").json() == {"show_filters": False}

    def test_dismiss_error(self, client, feed_client):
        client.post("/api/refresh")
        feed_client.fetch_events.return_value = FetchResult(success=False, error="down")
        client.post("/api/refresh")

        data = client.post("/api/errors/dismiss").json()

        assert data["status"] == "ready"
        assert data["errors"]["feed"] is None
        assert data["summary"]["filtered_count"] == 3


class TestMapEndpoints:
    """Tests for the rendered map endpoints."""

    def test_static_map_png(self, client, static_renderer):
        client.post("/api/refresh")

        response = client.get("/map.png")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == b"\x89PNG fake"
        assert static_renderer.add_marker.call_count == 3

    def test_static_map_render_failure(self, dashboard):
        renderer = make_static_renderer(MapImageResult(success=False, error="tiles down"))
        client = TestClient(create_app(dashboard, static_renderer_factory=lambda: renderer))

        response = client.get("/map.png")

        assert response.status_code == 503
        assert "tiles down" in response.json()["detail"]["error"]["message"]
        assert dashboard.render_error is not None

    def test_static_map_initialize_failure(self, dashboard):
        renderer = make_static_renderer(initialized=False)
        client = TestClient(create_app(dashboard, static_renderer_factory=lambda: renderer))

        response = client.get("/map.png")

        assert response.status_code == 503
        assert response.json()["detail"]["error"]["category"] == "render"

    def test_map_withheld_during_feed_error(self, client, feed_client):
        feed_client.fetch_events.return_value = FetchResult(success=False, error="down")
        client.post("/api/refresh")

        response = client.get("/map.png")

        assert response.status_code == 503
        assert response.json()["detail"]["error"]["category"] == "feed"

    def test_interactive_map_html(self, client):
        client.post("/api/refresh")
        client.put("/api/filters", json={"min_magnitude": 5})

        response = client.get("/map")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Test Zone" in response.text
        assert "circle_marker" in response.text
