"""Tests for coordinate validation and haversine distance."""

import math

import pytest

from wanderlog.schemas.place import Coordinates
from wanderlog.services.geo import haversine_distance_km, is_valid_coordinates


@pytest.mark.parametrize(
    ("lat", "lng", "expected"),
    [
        (0, 0, True),
        (90, 180, True),
        (-90, -180, True),
        (91, 0, False),
        (0, 181, False),
        (-90.0001, 0, False),
        (0, -180.0001, False),
        (math.nan, 0, False),
        (0, math.inf, False),
        (None, 0, False),
        ("north", 0, False),
    ],
)
def test_is_valid_coordinates(lat, lng, expected) -> None:
    assert is_valid_coordinates(lat, lng) is expected


def test_haversine_same_point_is_zero() -> None:
    kyoto = Coordinates(lat=35.0116, lng=135.7681)
    assert haversine_distance_km(kyoto, kyoto) == 0


def test_haversine_is_symmetric() -> None:
    paris = Coordinates(lat=48.8566, lng=2.3522)
    tokyo = Coordinates(lat=35.6762, lng=139.6503)
    assert haversine_distance_km(paris, tokyo) == pytest.approx(haversine_distance_km(tokyo, paris))


def test_haversine_known_distance() -> None:
    """Paris to London is roughly 344 km."""
    paris = Coordinates(lat=48.8566, lng=2.3522)
    london = Coordinates(lat=51.5074, lng=-0.1278)
    assert haversine_distance_km(paris, london) == pytest.approx(343.5, abs=2)
