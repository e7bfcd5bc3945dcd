"""Error taxonomy for the quake monitor.

Only TotalFailure crosses the feed client boundary. Cache read errors are
absorbed by the cache layer and network errors trigger the stale-cache
fallback before anything reaches the refresh controller.
"""


class QuakeMonitorError(Exception):
    """Base class for all quake monitor errors."""


class CacheReadError(QuakeMonitorError):
    """Cached data could not be read or decoded.

    Recovered locally: the cache layer logs it and reports a miss.
    """


class FetchError(QuakeMonitorError):
    """Fetching the event feed failed."""


class NetworkError(FetchError):
    """The request could not be completed or the body was unusable."""


class HttpStatusError(FetchError):
    """The feed answered with a non-success HTTP status.

    Attributes:
        status_code: HTTP status returned by the feed
    """

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"USGS API Error: {status_code} {reason}".strip())


class TotalFailure(FetchError):
    """No network success and no cached data to fall back on."""
