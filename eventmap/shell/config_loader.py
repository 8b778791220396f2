"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, AreaRegistry) are defined in eventmap/core to avoid
information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from eventmap.core.areas import Area, AreaRegistry, build_area_registry
from eventmap.core.clustering import DEFAULT_CLUSTER_RADIUS_METERS, SELECTION_TOLERANCE_METERS
from eventmap.core.config import Config
from eventmap.core.geo import Coordinates
from eventmap.core.selection import DEFAULT_TOGGLE_RADIUS_KM


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} environment placeholder.

    Non-strings and plain strings are returned unchanged, as is a
    placeholder whose variable is not set.
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


def _parse_area(data: dict[str, Any]) -> Area:
    """Parse an area from config data."""
    code = str(data["code"])
    return Area(
        code=code,
        display_name=str(data.get("display_name", code)),
        center=Coordinates(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
        ),
    )


def _parse_registry(data: dict[str, Any]) -> AreaRegistry:
    """Parse the area registry (areas + aliases) from config data."""
    areas = [_parse_area(a) for a in data.get("areas") or []]
    aliases = {
        str(label): str(code)
        for label, code in (data.get("aliases") or {}).items()
    }
    return build_area_registry(areas, aliases)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object

    Raises:
        KeyError: If an area is missing code/lat/lng
        ValueError: If a numeric field cannot be parsed
    """
    events_api_url = data.get("events_api_url")
    if events_api_url is not None:
        events_api_url = _resolve_value(events_api_url)
        # Unresolved placeholder: leave fetching disabled
        if events_api_url.startswith("${"):
            events_api_url = None

    return Config(
        cluster_radius_meters=float(
            data.get("cluster_radius_meters", DEFAULT_CLUSTER_RADIUS_METERS)
        ),
        selection_tolerance_meters=float(
            data.get("selection_tolerance_meters", SELECTION_TOLERANCE_METERS)
        ),
        default_toggle_radius_km=float(
            data.get("default_toggle_radius_km", DEFAULT_TOGGLE_RADIUS_KM)
        ),
        events_api_url=events_api_url,
        request_timeout=int(data.get("request_timeout", 30)),
        area_registry=_parse_registry(data),
    )


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
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: %d areas, %d aliases, cluster radius %.0fm",
        len(config.area_registry.areas),
        len(config.area_registry.aliases),
        config.cluster_radius_meters,
    )

    return config


def load_config_from_env(base: Config | None = None) -> Config:
    """Overlay environment variables on a configuration.

    Environment variables:
        EVENTS_API_URL: URL of the events feed
        CLUSTER_RADIUS_METERS: Marker clustering radius
        SELECTION_TOLERANCE_METERS: Center selection tolerance
        REQUEST_TIMEOUT: Events feed timeout in seconds

    Args:
        base: Configuration to start from (defaults if None)

    Returns:
        Config with any set variables applied
    """
    config = base or Config()

    events_api_url = os.environ.get("EVENTS_API_URL") or config.events_api_url
    cluster_radius = os.environ.get("CLUSTER_RADIUS_METERS")
    tolerance = os.environ.get("SELECTION_TOLERANCE_METERS")
    timeout = os.environ.get("REQUEST_TIMEOUT")

    return Config(
        cluster_radius_meters=(
            float(cluster_radius) if cluster_radius else config.cluster_radius_meters
        ),
        selection_tolerance_meters=(
            float(tolerance) if tolerance else config.selection_tolerance_meters
        ),
        default_toggle_radius_km=config.default_toggle_radius_km,
        events_api_url=events_api_url,
        request_timeout=int(timeout) if timeout else config.request_timeout,
        area_registry=config.area_registry,
    )
