"""Tests for application wiring in quake_dashboard.main."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI

from quake_dashboard.core.config import Config
from quake_dashboard.main import build_app
from quake_dashboard.shell.feed_client import FetchResult


class TestBuildApp:
    """Tests for build_app()."""

    def test_invalid_config_raises(self):
        with pytest.raises(ValueError):
            build_app(Config(request_timeout_seconds=0))

    @patch("quake_dashboard.main.FeedClient")
    def test_skips_startup_fetch_when_disabled(self, mock_client_class):
        app = build_app(Config(fetch_on_startup=False))

        assert isinstance(app, FastAPI)
        mock_client_class.return_value.fetch_events.assert_not_called()

    @patch("quake_dashboard.main.FeedClient")
    def test_startup_fetch_failure_does_not_raise(self, mock_client_class):
        """The app still starts and reports the feed error."""
        mock_client_class.return_value.fetch_events.return_value = FetchResult(
            success=False, error="Request timed out"
        )

        app = build_app(Config())

        assert isinstance(app, FastAPI)
        mock_client_class.return_value.fetch_events.assert_called_once()

    @patch("quake_dashboard.main.FeedClient")
    def test_client_uses_configured_feed(self, mock_client_class):
        build_app(Config(
            feed_url="https://feed.example.com/x.geojson",
            request_timeout_seconds=7,
            fetch_on_startup=False,
        ))

        mock_client_class.assert_called_once_with(
            feed_url="https://feed.example.com/x.geojson",
            timeout=7,
        )
