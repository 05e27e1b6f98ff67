"""Tests for the SQLAlchemy record store on an in-memory SQLite database."""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wanderlog.database import Base
from wanderlog.models import Entry, Trip, UserProfile
from wanderlog.services.record_store import RecordStore


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        db.add(UserProfile(id="user-1", display_name="Aiko", interests=["temples"]))
        db.add(UserProfile(id="user-2", display_name="Ben"))
        await db.flush()
        db.add_all([
            Trip(id="trip-old", user_id="user-1", name="Lisbon",
                 updated_at=datetime(2023, 5, 1, tzinfo=timezone.utc)),
            Trip(id="trip-new", user_id="user-1", name="Kyoto", countries_visited=["Japan"],
                 updated_at=datetime(2024, 11, 8, tzinfo=timezone.utc)),
            Trip(id="trip-other", user_id="user-2", name="Oslo"),
        ])
        await db.flush()
        db.add_all([
            Entry(id="e2", user_id="user-1", trip_id="trip-new", title="Nara",
                  entry_date=datetime(2024, 11, 3, tzinfo=timezone.utc)),
            Entry(id="e1", user_id="user-1", trip_id="trip-new", title="Arrival",
                  entry_date=datetime(2024, 11, 1, tzinfo=timezone.utc)),
            Entry(id="e3", user_id="user-1", trip_id="trip-old", title="Tram 28",
                  entry_date=datetime(2023, 4, 20, tzinfo=timezone.utc)),
        ])
        await db.commit()
        yield db


@pytest.mark.asyncio
async def test_get_trip_and_missing(session: AsyncSession) -> None:
    store = RecordStore(session)
    trip = await store.get_trip("trip-new")
    assert trip is not None
    assert trip.user_id == "user-1"
    assert trip.countries_visited == ["Japan"]
    assert await store.get_trip("nope") is None


@pytest.mark.asyncio
async def test_trip_entries_in_date_order(session: AsyncSession) -> None:
    store = RecordStore(session)
    entries = await store.get_trip_entries("trip-new")
    assert [e.id for e in entries] == ["e1", "e2"]


@pytest.mark.asyncio
async def test_user_history_ordering(session: AsyncSession) -> None:
    store = RecordStore(session)
    trips = await store.get_user_trips("user-1")
    entries = await store.get_user_entries("user-1")
    assert [t.id for t in trips] == ["trip-new", "trip-old"]
    assert [e.id for e in entries] == ["e2", "e1", "e3"]


@pytest.mark.asyncio
async def test_profile_lookup(session: AsyncSession) -> None:
    store = RecordStore(session)
    profile = await store.get_profile("user-1")
    assert profile.display_name == "Aiko"
    assert profile.interests == ["temples"]
    assert await store.get_profile("ghost") is None


@pytest.mark.asyncio
async def test_set_entry_place_mirrors_fields(session: AsyncSession) -> None:
    store = RecordStore(session)
    place = {
        "name": "Kasuga Taisha",
        "country": "Japan",
        "coordinates": {"lat": 34.681, "lng": 135.848},
        "placeId": "ChIJkasuga",
    }
    entry = await store.set_entry_place("e2", place)

    assert entry.place["placeId"] == "ChIJkasuga"
    assert entry.location == "Kasuga Taisha"
    assert entry.country == "Japan"
    assert entry.latitude == 34.681
    assert entry.longitude == 135.848
    assert await store.set_entry_place("missing", place) is None


@pytest.mark.asyncio
async def test_recommendation_cache_overwrite(session: AsyncSession) -> None:
    store = RecordStore(session)
    assert await store.get_cached_recommendations("user-1") is None

    await store.save_cached_recommendations("user-1", [{"destination": "Porto"}], 1000)
    await store.save_cached_recommendations("user-1", [{"destination": "Seville"}], 2000)

    cached = await store.get_cached_recommendations("user-1")
    assert cached == {
        "recommendations": [{"destination": "Seville"}],
        "generatedAt": 2000,
        "userId": "user-1",
    }
