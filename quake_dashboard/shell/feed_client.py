"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS summary feed.
All I/O is contained here; parsing is in the core module.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests

from quake_dashboard.core.config import DEFAULT_FEED_URL
from quake_dashboard.core.errors import DashboardError, ErrorCategory
from quake_dashboard.core.event import SeismicEvent, is_feature_collection, parse_feed


logger = logging.getLogger(__name__)


# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 30


@dataclass
class FetchResult:
    """Result of one feed request.

    Attributes:
        success: Whether the feed was fetched and parsed
        events: Parsed events in feed order (empty on failure)
        status_code: HTTP status code, 0 if no response was received
        error: Error message if failed
    """
    success: bool
    events: list[SeismicEvent] = field(default_factory=list)
    status_code: int = 0
    error: str | None = None

    @property
    def dashboard_error(self) -> DashboardError | None:
        """The failure as a feed-category DashboardError."""
        if self.success:
            return None
        return DashboardError(
            category=ErrorCategory.FEED,
            message=self.error or "Failed to load earthquake data",
        )


class FeedClient:
    """Client for fetching the earthquake summary feed.

    This is part of the imperative shell - it handles HTTP I/O.
    Failures are returned as FetchResult values, never raised.
    """

    def __init__(
        self,
        feed_url: str = DEFAULT_FEED_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize feed client.

        Args:
            feed_url: GeoJSON summary feed URL
            timeout: Request timeout in seconds
        """
        self.feed_url = feed_url
        self.timeout = timeout
        self.last_success_monotonic: float | None = None
        self.last_success_at: datetime | None = None

    def fetch_events(self) -> FetchResult:
        """Fetch and parse the feed.

        This method performs exactly one HTTP request and never retries.

        Returns:
            FetchResult with events or error
        """
        logger.info("Fetching earthquake feed from %s", self.feed_url)

        try:
            response = requests.get(self.feed_url, timeout=self.timeout)
        except requests.Timeout:
            logger.error("Feed request timed out after %ds", self.timeout)
            return FetchResult(
                success=False,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Feed request failed: %s", str(e))
            return FetchResult(
                success=False,
                error=f"Network error: {e}",
            )

        if not response.ok:
            logger.warning("Feed returned non-success status: %d", response.status_code)
            return FetchResult(
                success=False,
                status_code=response.status_code,
                error=f"HTTP error! status: {response.status_code}",
            )

        try:
            document = response.json()
        except ValueError:
            logger.error("Feed body is not valid JSON")
            return FetchResult(
                success=False,
                status_code=response.status_code,
                error="Malformed feed response: body is not JSON",
            )

        if not is_feature_collection(document):
            logger.error("Feed body has no features list")
            return FetchResult(
                success=False,
                status_code=response.status_code,
                error="Malformed feed response: missing features",
            )

        events = parse_feed(document)

        self.last_success_monotonic = time.monotonic()
        self.last_success_at = datetime.now(timezone.utc)

        logger.info(
            "Fetched %d events (%d features in feed)",
            len(events),
            len(document["features"]),
        )

        return FetchResult(
            success=True,
            events=events,
            status_code=response.status_code,
        )
