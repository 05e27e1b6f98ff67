"""Tests for the itinerary cache keys and fail-open behaviour."""

import pytest

from wanderlog.services.cache_service import CacheService


def test_itinerary_key_ignores_interest_order_and_case() -> None:
    cache = CacheService(url="redis://unused")
    a = cache.itinerary_key("Lisbon", "Portugal", 3, "2025-05-01", "moderate", ["Food", "art"])
    b = cache.itinerary_key(" lisbon ", "portugal", 3, "2025-05-01", "moderate", ["ART", "food "])
    assert a == b


def test_itinerary_key_separates_trip_parameters() -> None:
    cache = CacheService(url="redis://unused")
    base = cache.itinerary_key("Lisbon", "Portugal", 3, "2025-05-01", "moderate", [])
    assert base != cache.itinerary_key("Lisbon", "Portugal", 4, "2025-05-01", "moderate", [])
    assert base != cache.itinerary_key("Lisbon", "Portugal", 3, "2025-06-01", "moderate", [])
    assert base != cache.itinerary_key("Lisbon", "Portugal", 3, "2025-05-01", "luxury", [])


@pytest.mark.asyncio
async def test_unreachable_redis_fails_open() -> None:
    cache = CacheService(url="redis://127.0.0.1:1/0")
    assert await cache.get_itinerary("itinerary:anything") is None
    assert await cache.set("itinerary:anything", {"days": []}) is False
    await cache.close()
