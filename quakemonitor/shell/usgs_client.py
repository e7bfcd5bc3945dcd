"""USGS API Client - Imperative Shell.

This module handles HTTP communication with the USGS Earthquake API.
All I/O is contained here; record mapping is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import requests

from quakemonitor.core.config import DEFAULT_FEED_URL
from quakemonitor.core.errors import HttpStatusError, NetworkError
from quakemonitor.core.geo import MONITORED_REGION, BoundingBox


logger = logging.getLogger(__name__)


# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 30

# Lookback window of the dashboard query; USGS defaults to 30 days
LOOKBACK_DAYS = 365

# Result cap of the dashboard query
RESULT_LIMIT = 100


@dataclass
class USGSQueryParams:
    """Parameters for USGS API query.

    Attributes:
        bounds: Geographic bounding box (optional)
        start_time: Fetch earthquakes after this time
        limit: Maximum number of results
    """
    bounds: BoundingBox | None = None
    start_time: datetime | None = None
    limit: int = RESULT_LIMIT


def build_dashboard_query(now: datetime) -> USGSQueryParams:
    """Build the fixed dashboard query: monitored region, last 365 days.

    Args:
        now: Current time (UTC)

    Returns:
        Query parameters
    """
    return USGSQueryParams(
        bounds=MONITORED_REGION,
        start_time=now - timedelta(days=LOOKBACK_DAYS),
        limit=RESULT_LIMIT,
    )


class USGSClient:
    """Client for fetching earthquake data from USGS API.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_FEED_URL,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize USGS client.

        Args:
            base_url: USGS API base URL
            timeout: Request timeout in seconds
            session: HTTP session (a plain requests call if not provided)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session

    def _build_params(self, query: USGSQueryParams) -> dict[str, str]:
        """Build query parameters for USGS API request.

        Args:
            query: Query parameters

        Returns:
            Dict of URL query parameters
        """
        params: dict[str, str] = {
            "format": "geojson",
            "orderby": "time",
        }

        if query.bounds is not None:
            params["minlatitude"] = f"{query.bounds.min_latitude:g}"
            params["maxlatitude"] = f"{query.bounds.max_latitude:g}"
            params["minlongitude"] = f"{query.bounds.min_longitude:g}"
            params["maxlongitude"] = f"{query.bounds.max_longitude:g}"

        if query.start_time is not None:
            start = query.start_time.astimezone(timezone.utc)
            params["starttime"] = start.strftime("%Y-%m-%dT%H:%M:%S")

        if query.limit is not None:
            params["limit"] = str(query.limit)

        return params

    def fetch_earthquakes(self, query: USGSQueryParams) -> dict[str, Any]:
        """Fetch earthquake data from USGS API.

        This method performs HTTP I/O.

        Args:
            query: Query parameters

        Returns:
            Raw GeoJSON response from USGS

        Raises:
            HttpStatusError: If USGS answers with a non-success status
            NetworkError: If the request fails or the body is not JSON
        """
        params = self._build_params(query)

        logger.info(
            "Fetching earthquakes from USGS",
            extra={"params": params},
        )

        get = self.session.get if self.session is not None else requests.get
        try:
            response = get(
                self.base_url,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"USGS request failed: {e}") from e

        if not response.ok:
            raise HttpStatusError(response.status_code, response.reason or "")

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"USGS response is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise NetworkError("USGS response is not a GeoJSON object")

        # Shape is checked when features are mapped
        features = data.get("features")
        if isinstance(features, list):
            logger.info("Fetched %d earthquakes from USGS", len(features))

        return data

    def fetch_dashboard_feed(self, now: datetime | None = None) -> dict[str, Any]:
        """Fetch the dashboard's fixed regional query.

        Args:
            now: Current time (defaults to now, UTC)

        Returns:
            Raw GeoJSON response
        """
        if now is None:
            now = datetime.now(timezone.utc)
        return self.fetch_earthquakes(build_dashboard_query(now))
