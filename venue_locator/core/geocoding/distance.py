"""Great-circle distance, bearing and compass helpers."""

from math import asin, atan2, cos, degrees, floor, radians, sin, sqrt
from typing import Protocol

# Radius of earth in kilometers
EARTH_RADIUS_KM = 6371.0

COMPASS_LABELS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")
COMPASS_NAMES = (
    "North",
    "North-East",
    "East",
    "South-East",
    "South",
    "South-West",
    "West",
    "North-West",
)


class HasCoordinates(Protocol):
    latitude: float
    longitude: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the unrounded great circle distance between two points in km."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Clamp guards against float drift pushing a past 1 for antipodal points
    c = 2 * asin(sqrt(min(1.0, a)))

    return EARTH_RADIUS_KM * c


def distance(a: HasCoordinates, b: HasCoordinates) -> float:
    """Great-circle distance from ``a`` to ``b`` in km, rounded to 2 decimals."""
    return round(haversine_km(a.latitude, a.longitude, b.latitude, b.longitude), 2)


def initial_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial compass bearing in degrees from point 1 to point 2, in [0, 360)."""
    lat1, lat2 = radians(lat1), radians(lat2)
    dlon = radians(lon2 - lon1)

    y = sin(dlon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)

    result = (degrees(atan2(y, x)) + 360.0) % 360.0
    # (-tiny + 360) % 360 can round to exactly 360.0
    return 0.0 if result >= 360.0 else result


def bearing(a: HasCoordinates, b: HasCoordinates) -> float:
    """Initial bearing from ``a`` to ``b`` in degrees, in [0, 360)."""
    return initial_bearing(a.latitude, a.longitude, b.latitude, b.longitude)


def _compass_index(bearing_deg: float) -> int:
    # Half-way bearings round up (22.5 is NE)
    return int(floor(bearing_deg / 45 + 0.5)) % 8


def compass_label(bearing_deg: float) -> str:
    """Eight-point compass abbreviation (N, NE, ..., NW) for a bearing."""
    return COMPASS_LABELS[_compass_index(bearing_deg)]


def compass_name(bearing_deg: float) -> str:
    """Eight-point compass name ("North-East", ...) for a bearing."""
    return COMPASS_NAMES[_compass_index(bearing_deg)]


def format_distance(distance_km: float) -> str:
    """Format a distance for display: meters below 1 km, one decimal below 10 km."""
    if distance_km < 1:
        return f"{round(distance_km * 1000)}m"
    if distance_km < 10:
        return f"{distance_km:.1f}km"
    return f"{round(distance_km)}km"
