"""Coordinate validation and straight-line distance."""

import math

from wanderlog.schemas.place import Coordinates

EARTH_RADIUS_KM = 6371.0


def is_valid_coordinates(lat: float, lng: float) -> bool:
    """Single source of truth for lat in [-90, 90] and lng in [-180, 180]."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_distance_km(p1: Coordinates, p2: Coordinates) -> float:
    dlat = math.radians(p2.lat - p1.lat)
    dlng = math.radians(p2.lng - p1.lng)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(p1.lat))
        * math.cos(math.radians(p2.lat))
        * math.sin(dlng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
