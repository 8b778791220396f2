"""Events Feed Client - Imperative Shell.

This module handles HTTP communication with the events data layer.
All I/O is contained here; parsing is in the core module.
"""

import logging
from typing import Any

import requests


logger = logging.getLogger(__name__)


# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 30


class EventsClient:
    """Client for fetching the raw event list.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, base_url: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Initialize events client.

        Args:
            base_url: URL of the events feed
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

    def fetch_events(self, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        """Fetch raw event records.

        This method performs HTTP I/O. The feed may answer with a bare
        JSON list or with an object holding the list under "events".

        Args:
            params: Optional URL query parameters

        Returns:
            Raw event dicts, in feed order

        Raises:
            requests.RequestException: If the request fails
            ValueError: If the response is not an event list
        """
        logger.info("Fetching events", extra={"url": self.base_url})

        response = requests.get(
            self.base_url,
            params=params,
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        if isinstance(data, dict):
            data = data.get("events")

        if not isinstance(data, list):
            raise ValueError("Events feed did not return a list of events")

        logger.info("Fetched %d events", len(data))

        return data
