"""Shared fixtures: in-memory collaborators for the services and routes."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from wanderlog.dependencies import get_place_resolver, get_record_store, get_trip_intelligence
from wanderlog.main import app
from wanderlog.schemas.trip import EntryData, ProfileData, TripData
from wanderlog.services.cache_service import CacheService
from wanderlog.services.maps_loader import MapsCredentialLoader
from wanderlog.services.place_resolver import PlaceResolver
from wanderlog.services.trip_intelligence_service import TripIntelligenceService

MAPS_BASE_URL = "https://maps.test/api"


class FakeLLM:
    """Stands in for LLMClient; ``complete`` is an AsyncMock spy."""

    def __init__(self, reply: str = "", configured: bool = True):
        self.provider = "anthropic"
        self.model = "test-model"
        self.is_configured = configured
        self.complete = AsyncMock(return_value=reply)

    async def close(self):
        pass


class FakeCache(CacheService):
    """CacheService backed by a dict instead of Redis."""

    def __init__(self):
        super().__init__(url="redis://unused")
        self.data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return self.data.get(key)

    async def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        self.data[key] = value
        return True


class InMemoryRecordStore:
    """Same surface as RecordStore, kept in dicts."""

    def __init__(self):
        self.trips: dict[str, TripData] = {}
        self.entries: dict[str, EntryData] = {}
        self.profiles: dict[str, ProfileData] = {}
        self.recommendation_cache: dict[str, dict] = {}
        self.cache_writes = 0

    def add_trip(self, **fields) -> TripData:
        trip = TripData(**fields)
        self.trips[trip.id] = trip
        return trip

    def add_entry(self, **fields) -> EntryData:
        entry = EntryData(**fields)
        self.entries[entry.id] = entry
        return entry

    def add_profile(self, **fields) -> ProfileData:
        profile = ProfileData(**fields)
        self.profiles[profile.id] = profile
        return profile

    async def get_trip(self, trip_id: str) -> TripData | None:
        return self.trips.get(trip_id)

    async def get_trip_entries(self, trip_id: str) -> list[EntryData]:
        entries = [e for e in self.entries.values() if e.trip_id == trip_id]
        return sorted(entries, key=lambda e: (e.entry_date is None, e.entry_date))

    async def get_user_trips(self, user_id: str) -> list[TripData]:
        return [t for t in self.trips.values() if t.user_id == user_id]

    async def get_user_entries(self, user_id: str) -> list[EntryData]:
        return [e for e in self.entries.values() if e.user_id == user_id]

    async def get_profile(self, user_id: str) -> ProfileData | None:
        return self.profiles.get(user_id)

    async def get_entry(self, entry_id: str) -> EntryData | None:
        return self.entries.get(entry_id)

    async def set_entry_place(self, entry_id: str, place: dict) -> EntryData | None:
        entry = self.entries.get(entry_id)
        if entry is None:
            return None
        coords = place.get("coordinates") or {}
        updated = entry.model_copy(
            update={
                "place": place,
                "location": place.get("name") or entry.location,
                "country": place.get("country") or entry.country,
                "latitude": coords.get("lat", entry.latitude),
                "longitude": coords.get("lng", entry.longitude),
            }
        )
        self.entries[entry_id] = updated
        return updated

    async def get_cached_recommendations(self, user_id: str) -> dict | None:
        return self.recommendation_cache.get(user_id)

    async def save_cached_recommendations(
        self, user_id: str, recommendations: list[dict], generated_at: int
    ) -> None:
        self.cache_writes += 1
        self.recommendation_cache[user_id] = {
            "recommendations": recommendations,
            "generatedAt": generated_at,
            "userId": user_id,
        }


def make_resolver(handler: Callable[[httpx.Request], httpx.Response], api_key: str = "test-key") -> PlaceResolver:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PlaceResolver(
        client=client,
        credentials=MapsCredentialLoader(api_key=api_key, key_url=""),
        base_url=MAPS_BASE_URL,
    )


def _unexpected_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected provider call: {request.url}")


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def intelligence(llm: FakeLLM, cache: FakeCache) -> TripIntelligenceService:
    return TripIntelligenceService(llm=llm, cache=cache)


@pytest.fixture
def resolver_factory():
    return make_resolver


@pytest.fixture
def resolver() -> PlaceResolver:
    """A resolver that fails the test if it reaches the provider."""
    return make_resolver(_unexpected_request)


@pytest.fixture
def client(store, intelligence, resolver):
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_trip_intelligence] = lambda: intelligence
    app.dependency_overrides[get_place_resolver] = lambda: resolver
    yield TestClient(app)
    app.dependency_overrides.clear()
