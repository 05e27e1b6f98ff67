"""AI router: trip analysis, itinerary planning, recommendations and captions."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from wanderlog.exceptions import NotFound, Unauthorized, ValidationError
from wanderlog.schemas.ai import (
    AnalyzeTripRequest,
    CaptionRequest,
    PlanTripRequest,
    RecommendRequest,
)
from wanderlog.dependencies import get_place_resolver, get_record_store, get_trip_intelligence
from wanderlog.services.place_resolver import PlaceResolver
from wanderlog.services.record_store import RecordStore
from wanderlog.services.trip_intelligence_service import TripIntelligenceService

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_DURATION_DAYS = 1
MAX_DURATION_DAYS = 30


@router.post("/analyze-trip")
async def analyze_trip(
    req: AnalyzeTripRequest,
    store: RecordStore = Depends(get_record_store),
    intelligence: TripIntelligenceService = Depends(get_trip_intelligence),
):
    """Summarize a trip from its journal entries.

    Ownership is checked before the model is called; a trip without
    entries is rejected rather than summarized from nothing.
    """
    if not req.trip_id or not req.user_id:
        raise ValidationError("Missing tripId or userId")

    trip = await store.get_trip(req.trip_id)
    if not trip:
        raise NotFound("Trip not found")
    if trip.user_id != req.user_id:
        raise Unauthorized("Unauthorized")

    entries = await store.get_trip_entries(req.trip_id)
    if not entries:
        raise ValidationError("No entries found for this trip")

    summary = await intelligence.generate_trip_summary(trip, entries)
    logger.info(f"Trip {trip.id} analyzed from {len(entries)} entries")

    return {
        "summary": summary.model_dump(by_alias=True),
        "meta": {
            "entriesAnalyzed": len(entries),
            "model": intelligence.model,
            "cached": False,
        },
    }


@router.post("/plan-trip")
async def plan_trip(
    req: PlanTripRequest,
    intelligence: TripIntelligenceService = Depends(get_trip_intelligence),
):
    """Generate a day-by-day itinerary for a destination."""
    if not req.destination or not req.country or req.duration is None or not req.start_date:
        raise ValidationError("Missing required fields: destination, country, duration, startDate")
    if not MIN_DURATION_DAYS <= req.duration <= MAX_DURATION_DAYS:
        raise ValidationError(f"Duration must be between {MIN_DURATION_DAYS} and {MAX_DURATION_DAYS} days")

    itinerary = await intelligence.generate_itinerary(
        destination=req.destination,
        country=req.country,
        duration_days=req.duration,
        start_date=req.start_date,
        interests=req.interests,
        budget_tier=req.budget,
    )

    return {
        "itinerary": itinerary,
        "meta": {
            "model": intelligence.model,
            "generated": datetime.now(timezone.utc).isoformat(),
        },
    }


@router.post("/recommend")
async def recommend(
    req: RecommendRequest,
    store: RecordStore = Depends(get_record_store),
    intelligence: TripIntelligenceService = Depends(get_trip_intelligence),
):
    """Recommend new destinations from the user's travel history.

    Served from the per-user cache while it is less than 24 hours old.
    """
    if not req.user_id:
        raise ValidationError("Missing userId")
    if req.limit < 1:
        raise ValidationError("limit must be a positive integer")

    profile = await store.get_profile(req.user_id)
    if not profile:
        raise NotFound("User not found")

    trips = await store.get_user_trips(req.user_id)
    entries = await store.get_user_entries(req.user_id)

    result = await intelligence.generate_recommendations(
        profile, trips, entries, req.limit, store=store
    )
    recommendations = [r.model_dump(by_alias=True) for r in result.recommendations]

    if result.message:
        return {"recommendations": recommendations, "message": result.message}

    return {
        "recommendations": recommendations,
        "meta": {
            "basedOnTrips": len(trips),
            "basedOnEntries": len(entries),
            "model": intelligence.model,
            "cached": result.cached,
        },
    }


@router.post("/caption")
async def caption(
    req: CaptionRequest,
    intelligence: TripIntelligenceService = Depends(get_trip_intelligence),
):
    """Suggest a photo caption for an entry."""
    if not req.location or not req.country:
        raise ValidationError("Missing required fields: location, country")

    text = await intelligence.generate_caption(req.location, req.country, req.existing_content)
    return {"caption": text, "meta": {"model": intelligence.model}}


@router.get("/health")
async def ai_health(
    intelligence: TripIntelligenceService = Depends(get_trip_intelligence),
    resolver: PlaceResolver = Depends(get_place_resolver),
):
    """Report whether the model credential is configured and which features it enables."""
    configured = intelligence.llm.is_configured
    return {
        "status": "operational" if configured else "not_configured",
        "provider": intelligence.llm.provider,
        "model": intelligence.model,
        "features": {
            "tripAnalysis": configured,
            "recommendations": configured,
            "itineraryPlanning": configured,
            "captionGeneration": configured,
        },
        "mapsConfigured": resolver.is_configured,
        "message": (
            "AI features are ready"
            if configured
            else f"Set the API key for the '{intelligence.llm.provider}' provider to enable AI features"
        ),
    }
