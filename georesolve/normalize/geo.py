"""Great-circle distance and coordinate helpers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

EARTH_RADIUS_METERS = 6_371_000.0


@dataclass(frozen=True, slots=True)
class Coordinates:
    """Represents a resolved coordinate pair."""

    latitude: float
    longitude: float


def haversine_distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two points in metres."""
    lat1_r = math.radians(lat1)
    lat2_r = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def format_coordinates(coordinates: Coordinates) -> str:
    return f"{coordinates.latitude:.6f}, {coordinates.longitude:.6f}"


def to_finite_float(value: object) -> Optional[float]:
    """Coerce provider values (numbers or numeric strings) to a finite float."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_coordinates(latitude: object, longitude: object) -> Optional[Coordinates]:
    """Return coordinates when both values are finite and within WGS84 ranges."""
    lat = to_finite_float(latitude)
    lon = to_finite_float(longitude)
    if lat is None or lon is None:
        return None
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        return None
    return Coordinates(latitude=lat, longitude=lon)


def within_radius(point: Coordinates, center: Coordinates, radius_meters: float) -> Tuple[bool, int]:
    """Check a point against a circular geofence.

    Returns whether the point lies inside the radius together with the
    distance in whole metres, which callers surface in match details.
    """
    distance = round(
        haversine_distance_meters(point.latitude, point.longitude, center.latitude, center.longitude)
    )
    return distance <= radius_meters, distance
