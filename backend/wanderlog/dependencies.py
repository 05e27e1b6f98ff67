from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlog.database import get_db
from wanderlog.services.place_resolver import PlaceResolver, place_resolver
from wanderlog.services.record_store import RecordStore
from wanderlog.services.trip_intelligence_service import TripIntelligenceService, trip_intelligence


async def get_record_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_trip_intelligence() -> TripIntelligenceService:
    return trip_intelligence


def get_place_resolver() -> PlaceResolver:
    return place_resolver
