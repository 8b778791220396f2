"""Geographic calculations - Pure functions.

This module provides coordinates and distance calculations for event
locations. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from typing import Any


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinates:
    """A point on the map.

    Values are not clamped to valid latitude/longitude ranges.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
    """
    lat: float
    lng: float

    def is_finite(self) -> bool:
        """Check that both components are finite numbers."""
        return is_finite_number(self.lat) and is_finite_number(self.lng)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """Check if a value is a finite int or float (bools excluded)."""
    return _is_number(value) and math.isfinite(value)


def parse_coordinates(data: Any) -> Coordinates | None:
    """Parse a {"lat": ..., "lng": ...} mapping into Coordinates.

    Pure function.

    Args:
        data: Raw mapping (usually decoded JSON)

    Returns:
        Coordinates, or None if either component is missing or not numeric.
        Non-finite numbers are kept so callers can report and skip them.
    """
    if not isinstance(data, dict):
        return None

    lat = data.get("lat")
    lng = data.get("lng")
    if not _is_number(lat) or not _is_number(lng):
        return None

    return Coordinates(lat=float(lat), lng=float(lng))


def calculate_distance(a: Coordinates, b: Coordinates) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function. Symmetric, zero for identical points. The haversine
    term is clamped to [0, 1] so rounding near antipodal points never
    produces a math domain error.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(a.lat)
    lat2_rad = math.radians(b.lat)
    delta_lat = math.radians(b.lat - a.lat)
    delta_lng = math.radians(b.lng - a.lng)

    # Haversine formula
    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_KM * c


def is_within_meters(a: Coordinates, b: Coordinates, radius_meters: float) -> bool:
    """Check if two points are within a radius of each other.

    Pure function.

    Args:
        a: First point
        b: Second point
        radius_meters: Radius in meters (inclusive)

    Returns:
        True if the points are at most radius_meters apart
    """
    return calculate_distance(a, b) * 1000 <= radius_meters


def is_within_radius_km(
    point: Coordinates,
    center: Coordinates,
    radius_km: float,
) -> bool:
    """Check if a point is within a radius (in kilometers) of a center.

    Pure function.
    """
    return calculate_distance(center, point) <= radius_km
