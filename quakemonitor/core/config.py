"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.

The query region, lookback window, result cap, cache TTL and refresh
cadence are fixed constants, not configuration.
"""

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_FEED_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
DEFAULT_TILE_URL = "https://a.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}.png"
DEFAULT_TIMEZONE = "Asia/Dhaka"
DEFAULT_REGION_NAME = "Bangladesh & Border Regions"

# Fixed refresh cadence
REFRESH_INTERVAL_MS = 60_000


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_url: USGS FDSN event query endpoint
        request_timeout_seconds: Timeout for feed requests
        cache_dir: Directory holding the cache slot
        display_timezone: IANA zone used for display strings
        region_name: Human-readable name of the monitored region
        map_width: Rendered map width in pixels
        map_height: Rendered map height in pixels
        tile_url: Tile URL template for the rendered map
        log_level: Logging level name
    """
    feed_url: str = DEFAULT_FEED_URL
    request_timeout_seconds: int = 30
    cache_dir: str = ".cache"
    display_timezone: str = DEFAULT_TIMEZONE
    region_name: str = DEFAULT_REGION_NAME
    map_width: int = 800
    map_height: int = 450
    tile_url: str = DEFAULT_TILE_URL
    log_level: str = "INFO"

    @property
    def tz(self) -> ZoneInfo:
        """Display time zone object."""
        return ZoneInfo(self.display_timezone)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_config(config: Config) -> ValidationResult:
    """Validate a configuration.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult listing every problem found
    """
    errors: list[ValidationError] = []

    try:
        ZoneInfo(config.display_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(ValidationError(
            field="display_timezone",
            message=f"Unknown time zone: {config.display_timezone}",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message="Timeout must be positive",
        ))

    if config.map_width <= 0 or config.map_height <= 0:
        errors.append(ValidationError(
            field="map_size",
            message="Map width and height must be positive",
        ))

    if not config.feed_url.startswith("https://"):
        errors.append(ValidationError(
            field="feed_url",
            message="Feed URL is not HTTPS",
            severity="warning",
        ))

    if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(ValidationError(
            field="log_level",
            message=f"Unknown log level: {config.log_level}",
            severity="warning",
        ))

    critical = [e for e in errors if e.severity == "error"]
    return ValidationResult(valid=not critical, errors=errors)
