from dataclasses import dataclass
from typing import Any

from wanderlog.schemas.common import CamelModel

# Opaque day-by-day plan, returned as the model produced it
Itinerary = dict[str, Any]


class TripSummary(CamelModel):
    title: str = "Trip Summary"
    summary: str = ""
    highlights: list[str] = []
    recommendations: list[str] = []


class RecommendationItem(CamelModel):
    destination: str
    country: str
    reason: str = ""
    best_time: str = ""
    highlights: list[str] = []


@dataclass
class RecommendationResult:
    recommendations: list[RecommendationItem]
    message: str | None = None
    cached: bool = False
    generated_at: int | None = None  # epoch ms of the model call that produced the set


# Request bodies. Required fields are optional here so that missing ones
# can be reported with the API's own 400 error envelope.

class AnalyzeTripRequest(CamelModel):
    trip_id: str | None = None
    user_id: str | None = None


class PlanTripRequest(CamelModel):
    destination: str | None = None
    country: str | None = None
    duration: int | None = None
    start_date: str | None = None
    interests: list[str] = []
    budget: str = "moderate"


class RecommendRequest(CamelModel):
    user_id: str | None = None
    limit: int = 5


class CaptionRequest(CamelModel):
    location: str | None = None
    country: str | None = None
    existing_content: str | None = None
