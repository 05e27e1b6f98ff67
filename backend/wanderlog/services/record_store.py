"""Record store: the simple reads and writes the API needs over the journal tables."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlog.models import Entry, RecommendationCache, Trip, UserProfile, recommendation_cache_path
from wanderlog.schemas.trip import EntryData, ProfileData, TripData

logger = logging.getLogger(__name__)


class RecordStore:
    """Reads trips, entries and profiles; owns the per-user recommendation cache record."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_trip(self, trip_id: str) -> TripData | None:
        trip = await self.db.get(Trip, trip_id)
        return TripData.model_validate(trip) if trip else None

    async def get_trip_entries(self, trip_id: str) -> list[EntryData]:
        result = await self.db.execute(
            select(Entry).where(Entry.trip_id == trip_id).order_by(Entry.entry_date.asc())
        )
        return [EntryData.model_validate(e) for e in result.scalars().all()]

    async def get_user_trips(self, user_id: str) -> list[TripData]:
        """Most recently updated first."""
        result = await self.db.execute(
            select(Trip).where(Trip.user_id == user_id).order_by(Trip.updated_at.desc())
        )
        return [TripData.model_validate(t) for t in result.scalars().all()]

    async def get_user_entries(self, user_id: str) -> list[EntryData]:
        """Newest first."""
        result = await self.db.execute(
            select(Entry).where(Entry.user_id == user_id).order_by(Entry.entry_date.desc())
        )
        return [EntryData.model_validate(e) for e in result.scalars().all()]

    async def get_profile(self, user_id: str) -> ProfileData | None:
        profile = await self.db.get(UserProfile, user_id)
        return ProfileData.model_validate(profile) if profile else None

    async def get_entry(self, entry_id: str) -> EntryData | None:
        entry = await self.db.get(Entry, entry_id)
        return EntryData.model_validate(entry) if entry else None

    async def set_entry_place(self, entry_id: str, place: dict) -> EntryData | None:
        """Persist a normalized place on an entry and mirror its label and coordinates."""
        entry = await self.db.get(Entry, entry_id)
        if entry is None:
            return None

        entry.place = place
        entry.location = place.get("name") or entry.location
        entry.country = place.get("country") or entry.country
        coords = place.get("coordinates")
        if coords:
            entry.latitude = coords["lat"]
            entry.longitude = coords["lng"]

        await self.db.commit()
        await self.db.refresh(entry)
        return EntryData.model_validate(entry)

    # Recommendation cache

    async def get_cached_recommendations(self, user_id: str) -> dict | None:
        record = await self.db.get(RecommendationCache, recommendation_cache_path(user_id))
        if record is None:
            return None
        return {
            "recommendations": record.recommendations,
            "generatedAt": record.generated_at,
            "userId": record.user_id,
        }

    async def save_cached_recommendations(
        self, user_id: str, recommendations: list[dict], generated_at: int
    ) -> None:
        """Overwrite the user's cache record. Last writer wins."""
        await self.db.merge(
            RecommendationCache(
                path=recommendation_cache_path(user_id),
                user_id=user_id,
                recommendations=recommendations,
                generated_at=generated_at,
            )
        )
        await self.db.commit()
        logger.info(f"Recommendation cache refreshed for user {user_id} ({len(recommendations)} items)")
