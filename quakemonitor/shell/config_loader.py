"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in quakemonitor/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quakemonitor.core.config import Config, validate_config


logger = logging.getLogger(__name__)


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} placeholder from the environment.

    Non-string values and plain strings are returned unchanged; a
    placeholder whose variable is unset is left as-is.

    Args:
        value: Value to resolve

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    data = {key: _resolve_value(value) for key, value in data.items()}
    defaults = Config()

    config = Config(
        feed_url=data.get("feed_url", defaults.feed_url),
        request_timeout_seconds=int(
            data.get("request_timeout_seconds", defaults.request_timeout_seconds)
        ),
        cache_dir=str(data.get("cache_dir", defaults.cache_dir)),
        display_timezone=data.get("display_timezone", defaults.display_timezone),
        region_name=data.get("region_name", defaults.region_name),
        map_width=int(data.get("map_width", defaults.map_width)),
        map_height=int(data.get("map_height", defaults.map_height)),
        tile_url=data.get("tile_url", defaults.tile_url),
        log_level=str(data.get("log_level", defaults.log_level)).upper(),
    )

    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not result.valid:
        messages = "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        raise ValueError(f"Invalid configuration: {messages}")

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If the configuration fails validation
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return load_config_from_env()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return load_config_from_env()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: cache in %s, display time zone %s",
        config.cache_dir,
        config.display_timezone,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        USGS_FEED_URL: Feed query endpoint
        QUAKE_CACHE_DIR: Directory holding the cache slot
        QUAKE_TIMEZONE: IANA time zone for display strings
        LOG_LEVEL: Logging level name

    Returns:
        Config object from environment
    """
    data: dict[str, Any] = {}

    env_fields = {
        "USGS_FEED_URL": "feed_url",
        "QUAKE_CACHE_DIR": "cache_dir",
        "QUAKE_TIMEZONE": "display_timezone",
        "LOG_LEVEL": "log_level",
    }
    for env_name, field_name in env_fields.items():
        value = os.environ.get(env_name)
        if value:
            data[field_name] = value

    return load_config_from_dict(data)
