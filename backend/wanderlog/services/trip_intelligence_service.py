"""Trip Intelligence Service: LLM-powered journal insights.

Provides:
- Trip summaries from a trip's journal entries
- Day-by-day itineraries for a destination
- Destination recommendations from a traveler's history (24h per-user cache)
- Photo captions

Every operation is one linear pass: build a prompt, make one model call,
parse the reply. Model failures are surfaced, never retried.
"""

import logging
import re
import time
from collections import Counter
from datetime import date

from pydantic import ValidationError as SchemaError

from wanderlog.config import settings
from wanderlog.exceptions import ModelOutputUnparsable
from wanderlog.schemas.ai import Itinerary, RecommendationItem, RecommendationResult, TripSummary
from wanderlog.schemas.trip import EntryData, ProfileData, TripData
from wanderlog.services.cache_service import CacheService, cache_service
from wanderlog.services.llm_client import LLMClient, extract_json_payload, llm_client

logger = logging.getLogger(__name__)

MAX_RECOMMENDATION_TRIPS = 10
ENTRY_CONTENT_CHARS = 1000
NO_HISTORY_MESSAGE = "Start logging trips to get personalized recommendations!"

SUMMARY_SYSTEM_PROMPT = """You are a travel writing assistant that turns a traveler's journal entries into an engaging, personal trip summary. Stay faithful to what the entries describe; do not invent events.

Your response MUST be valid JSON with this exact structure:
{
    "title": "A compelling title for the trip (max 60 characters)",
    "summary": "2-3 paragraphs highlighting key moments, experiences and emotions",
    "highlights": ["3-5 specific highlights drawn from the entries"],
    "recommendations": ["Advice for future travelers to these places, if applicable"]
}

Respond with ONLY the JSON, no preamble."""

ITINERARY_SYSTEM_PROMPT = """You are a master trip planner. Build practical day-by-day itineraries: mix active exploration with rest, group nearby activities to minimize backtracking, include authentic local experiences, and respect the stated budget level.

Your response MUST be valid JSON with this exact structure:
{
    "tripName": "Creative name for this itinerary",
    "overview": "2 paragraphs: what makes this itinerary special and its key themes",
    "days": [
        {
            "day": 1,
            "date": "YYYY-MM-DD",
            "theme": "Arrival & Orientation",
            "location": "Neighborhood or area",
            "morning": {"time": "9:00 AM", "activity": "Specific activity and venue", "duration": "2 hours", "why": "Reason for this slot"},
            "afternoon": {"time": "2:00 PM", "activity": "...", "duration": "...", "why": "..."},
            "evening": {"time": "7:00 PM", "activity": "...", "duration": "...", "why": "..."},
            "transportation": "How to get around",
            "estimatedCost": "$50-100",
            "tips": "2-3 practical tips for this day",
            "alternatives": "Backup options for bad weather or closures"
        }
    ],
    "totalEstimatedCost": "$500-800",
    "packingList": ["10-15 essential items"],
    "travelTips": ["5-7 insider tips about the destination"],
    "emergencyInfo": {"hospitals": "...", "police": "...", "embassy": "..."}
}

Respond with ONLY the JSON, no preamble."""

RECOMMENDATION_SYSTEM_PROMPT = """You are a travel recommendation assistant. Analyze a traveler's history and suggest new destinations that match their demonstrated interests without repeating places they have already been. Favor diversity across regions, cultures and activities, and account for practical considerations such as seasons and accessibility.

Your response MUST be a valid JSON array with this exact structure:
[
    {
        "destination": "City or region",
        "country": "Country name",
        "reason": "Why this destination matches their travel style, citing their history",
        "bestTime": "Best time to visit",
        "highlights": ["highlight 1", "highlight 2", "highlight 3"]
    }
]

Respond with ONLY the JSON array, no preamble."""

CAPTION_SYSTEM_PROMPT = """You write photo captions for a personal travel journal. Captions are 1-2 sentences, personal and authentic rather than generic, capture emotion and place, and mention the location naturally.

Respond with ONLY the caption text."""

_SEASONS = ("winter", "spring", "summer", "fall")

_STYLE_KEYWORDS = {
    "cultural": ["museum", "temple", "history", "art", "traditional"],
    "adventure": ["hike", "climb", "adventure", "trail", "mountain"],
    "foodie": ["food", "restaurant", "cafe", "market", "cooking"],
    "relaxation": ["beach", "spa", "relax", "peaceful", "quiet"],
}

_LUXURY_KEYWORDS = ["luxury", "5-star", "expensive", "fine dining", "private"]
_BUDGET_KEYWORDS = ["hostel", "budget", "cheap", "street food", "backpacker"]


def _season(month: int) -> str:
    if month in (12, 1, 2):
        return "winter"
    if month <= 5:
        return "spring"
    if month <= 8:
        return "summer"
    return "fall"


class TripIntelligenceService:
    """Prompt building, model invocation and reply parsing for journal AI features."""

    def __init__(self, llm: LLMClient | None = None, cache: CacheService | None = None):
        self.llm = llm or llm_client
        self.cache = cache or cache_service
        self.recommendation_ttl_ms = settings.recommendation_cache_ttl_hours * 60 * 60 * 1000

    @property
    def model(self) -> str:
        return self.llm.model

    # ─── Trip summary ───

    async def generate_trip_summary(self, trip: TripData, entries: list[EntryData]) -> TripSummary:
        """Summarize a trip from all of its entries.

        The caller guarantees at least one entry. An unparsable reply degrades
        to a summary carrying the raw text instead of failing the request.
        """
        prompt = self._build_summary_prompt(trip, entries)
        raw_text = await self.llm.complete(
            system=SUMMARY_SYSTEM_PROMPT,
            user=prompt,
            max_tokens=1000,
            temperature=0.4,
        )

        try:
            data = extract_json_payload(raw_text)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return TripSummary.model_validate(data)
        except (ValueError, SchemaError) as e:
            logger.warning(f"Trip summary reply for trip {trip.id} was not valid JSON, degrading: {e}")
            return TripSummary(summary=raw_text, highlights=[], recommendations=[])

    def _build_summary_prompt(self, trip: TripData, entries: list[EntryData]) -> str:
        stats = self.trip_stats(trip, entries)
        countries = trip.countries_visited or sorted({e.country for e in entries if e.country})

        sections = ["=== TRIP OVERVIEW ==="]
        sections.append(f"Name: {trip.name}")
        if trip.description:
            sections.append(f"Description: {trip.description}")
        if trip.start_date:
            sections.append(f"Dates: {trip.start_date.isoformat()} to {trip.end_date.isoformat() if trip.end_date else 'ongoing'}")
        sections.append(f"Duration: {stats['duration_days']} days")
        sections.append(f"Countries: {', '.join(countries) or 'Unknown'}")
        sections.append(f"Places visited: {stats['places_visited']}")
        sections.append(f"Entries: {len(entries)}")
        sections.append(f"Photos: {stats['photos']}")

        sections.append("\n=== JOURNAL ENTRIES ===")
        for i, entry in enumerate(entries, start=1):
            place = ", ".join(p for p in (entry.location, entry.country) if p) or "Unknown location"
            when = entry.entry_date.date().isoformat() if entry.entry_date else "undated"
            sections.append(f"\n--- Entry {i}: {entry.title or 'Untitled'} ---")
            sections.append(f"Date: {when}")
            sections.append(f"Place: {place}")
            sections.append(f"Type: {entry.category}")
            content = entry.content.strip()
            if len(content) > ENTRY_CONTENT_CHARS:
                content = content[:ENTRY_CONTENT_CHARS].rstrip() + "..."
            if content:
                sections.append(content)

        return "\n".join(sections)

    @staticmethod
    def trip_stats(trip: TripData, entries: list[EntryData]) -> dict:
        """Duration, distinct places and photo count for a trip."""
        entry_days = [e.entry_date.date() for e in entries if e.entry_date]
        if trip.start_date:
            # Open-ended trips count up to today
            start, end = trip.start_date, trip.end_date or date.today()
        elif entry_days:
            start, end = min(entry_days), max(entry_days)
        else:
            start = end = None

        duration_days = max(1, (end - start).days + 1) if start else 1
        places = {(e.location, e.country) for e in entries if e.location or e.country}

        return {
            "duration_days": duration_days,
            "places_visited": len(places),
            "photos": sum(len(e.media_urls) for e in entries),
        }

    # ─── Itinerary ───

    async def generate_itinerary(
        self,
        destination: str,
        country: str,
        duration_days: int,
        start_date: str,
        interests: list[str] | None = None,
        budget_tier: str = "moderate",
    ) -> Itinerary:
        """Plan a day-by-day itinerary.

        duration_days is range-checked by the caller; this only checks the
        shape of the model's reply.
        """
        interests = list(interests or [])
        cache_key = self.cache.itinerary_key(
            destination, country, duration_days, start_date, budget_tier, interests
        )
        cached = await self.cache.get_itinerary(cache_key)
        if cached:
            logger.info(f"Itinerary cache hit: {cache_key}")
            return cached

        prompt = "\n".join([
            f"Create a {duration_days}-day itinerary for {destination}, {country}.",
            "",
            "=== TRIP PARAMETERS ===",
            f"Destination: {destination}, {country}",
            f"Duration: {duration_days} days",
            f"Start date: {start_date}",
            f"Interests: {', '.join(interests) or 'General exploration'}",
            f"Budget: {budget_tier}",
            "",
            f"Return exactly {duration_days} entries in \"days\", dated consecutively from {start_date}.",
        ])

        raw_text = await self.llm.complete(
            system=ITINERARY_SYSTEM_PROMPT,
            user=prompt,
            max_tokens=6000,
            temperature=0.6,
        )

        try:
            itinerary = extract_json_payload(raw_text)
        except ValueError as e:
            logger.error(f"Itinerary reply for {destination} was not valid JSON: {e}")
            raise ModelOutputUnparsable("Failed to parse itinerary from model output", str(e)) from e
        if not isinstance(itinerary, dict):
            raise ModelOutputUnparsable(
                "Failed to parse itinerary from model output",
                f"expected a JSON object, got {type(itinerary).__name__}",
            )

        await self.cache.set_itinerary(cache_key, itinerary)
        return itinerary

    # ─── Recommendations ───

    async def generate_recommendations(
        self,
        profile: ProfileData,
        trips: list[TripData],
        entries: list[EntryData],
        limit: int = 5,
        *,
        store,
    ) -> RecommendationResult:
        """Recommend new destinations from the traveler's history.

        ``store`` provides get_cached_recommendations / save_cached_recommendations.
        The cache is per user regardless of ``limit``: a fresh cached set is
        served as-is (truncated to ``limit``), and every model call overwrites it.
        """
        if not entries:
            return RecommendationResult(recommendations=[], message=NO_HISTORY_MESSAGE)

        cached = await store.get_cached_recommendations(profile.id)
        if cached:
            try:
                generated_at = int(cached.get("generatedAt") or 0)
                items = [RecommendationItem.model_validate(r) for r in cached.get("recommendations") or []]
            except (TypeError, ValueError, SchemaError) as e:
                logger.warning(f"Ignoring malformed recommendation cache for user {profile.id}: {e}")
            else:
                if self._now_ms() - generated_at < self.recommendation_ttl_ms:
                    return RecommendationResult(
                        recommendations=items[:limit],
                        cached=True,
                        generated_at=generated_at,
                    )

        prompt = self._build_recommendation_prompt(profile, trips, entries, limit)
        raw_text = await self.llm.complete(
            system=RECOMMENDATION_SYSTEM_PROMPT,
            user=prompt,
            max_tokens=1500,
            temperature=0.8,
        )
        items = self._parse_recommendations(raw_text)

        generated_at = self._now_ms()
        await store.save_cached_recommendations(
            profile.id,
            [item.model_dump(by_alias=True) for item in items],
            generated_at,
        )
        return RecommendationResult(recommendations=items[:limit], generated_at=generated_at)

    @staticmethod
    def _parse_recommendations(raw_text: str) -> list[RecommendationItem]:
        try:
            data = extract_json_payload(raw_text)
        except ValueError as e:
            logger.error(f"Recommendation reply was not valid JSON: {e}")
            raise ModelOutputUnparsable("Failed to parse AI response", str(e)) from e

        # Tolerate {"recommendations": [...]} wrappers
        if isinstance(data, dict) and isinstance(data.get("recommendations"), list):
            data = data["recommendations"]
        if not isinstance(data, list):
            raise ModelOutputUnparsable(
                "Failed to parse AI response", f"expected a JSON array, got {type(data).__name__}"
            )

        try:
            return [RecommendationItem.model_validate(item) for item in data]
        except SchemaError as e:
            logger.error(f"Recommendation items did not match the schema: {e}")
            raise ModelOutputUnparsable("Failed to parse AI response", str(e)) from e

    def _build_recommendation_prompt(
        self,
        profile: ProfileData,
        trips: list[TripData],
        entries: list[EntryData],
        limit: int,
    ) -> str:
        travel_profile = self.build_travel_profile(entries)
        recent_trips = self.most_recent_trips(trips)
        upper = max(7, limit)

        sections = [f"Based on this traveler's history, suggest between 5 and {upper} new destinations they might enjoy."]
        sections.append("\n=== TRAVELER PROFILE ===")
        sections.append(f"Entries logged: {len(entries)}")
        sections.append(f"Countries visited: {', '.join(travel_profile['visited_countries']) or 'None recorded'}")
        sections.append(f"Interests: {', '.join(profile.interests) or 'General exploration'}")
        sections.append(f"Favorite places: {', '.join(profile.favorite_places) or 'None specified'}")
        sections.append(f"Languages: {', '.join(profile.languages_spoken) or 'English'}")

        sections.append("\n=== TRAVEL PATTERNS ===")
        sections.append(f"Most common entry types: {', '.join(travel_profile['top_categories']) or 'journal'}")
        sections.append(f"Preferred season: {travel_profile['preferred_season']}")
        sections.append(f"Travel style: {travel_profile['travel_style']}")
        sections.append(f"Budget pattern: {travel_profile['budget_level']}")

        sections.append(f"\n=== PAST TRIPS (most recent {len(recent_trips)}) ===")
        if not recent_trips:
            sections.append("No trips recorded; entries are standalone.")
        for t in recent_trips:
            countries = ", ".join(t.countries_visited) or "countries not recorded"
            line = f"- {t.name} ({countries}), {len(t.entry_ids)} entries"
            if t.description:
                line += f": {t.description}"
            sections.append(line)

        return "\n".join(sections)

    @staticmethod
    def most_recent_trips(trips: list[TripData], limit: int = MAX_RECOMMENDATION_TRIPS) -> list[TripData]:
        dated = sorted(
            (t for t in trips if t.updated_at is not None),
            key=lambda t: t.updated_at,
            reverse=True,
        )
        undated = [t for t in trips if t.updated_at is None]
        return (dated + undated)[:limit]

    @staticmethod
    def build_travel_profile(entries: list[EntryData]) -> dict:
        """Infer countries, habits, season, style and budget from entries."""
        visited_countries = list(dict.fromkeys(e.country for e in entries if e.country))
        top_categories = [c for c, _ in Counter(e.category for e in entries).most_common(3)]

        season_counts = Counter(_season(e.entry_date.month) for e in entries if e.entry_date)
        if season_counts:
            best = max(season_counts.values())
            preferred_season = next(s for s in _SEASONS if season_counts[s] == best)
        else:
            preferred_season = "any"

        return {
            "visited_countries": visited_countries,
            "top_categories": top_categories,
            "preferred_season": preferred_season,
            "travel_style": TripIntelligenceService.infer_travel_style(entries),
            "budget_level": TripIntelligenceService.infer_budget_level(entries),
        }

    @staticmethod
    def infer_travel_style(entries: list[EntryData]) -> str:
        words = [w for e in entries for w in e.content.lower().split()]
        best_style, best_score = "explorer", 0
        for style, indicators in _STYLE_KEYWORDS.items():
            score = sum(1 for indicator in indicators for w in words if indicator in w)
            if score > best_score:
                best_style, best_score = style, score
        return best_style

    @staticmethod
    def infer_budget_level(entries: list[EntryData]) -> str:
        if not entries:
            return "moderate"
        text = " ".join(e.content.lower() for e in entries)
        luxury = sum(1 for k in _LUXURY_KEYWORDS if k in text)
        budget = sum(1 for k in _BUDGET_KEYWORDS if k in text)
        if luxury > budget + 1:
            return "luxury"
        if budget > luxury + 1:
            return "budget"
        return "moderate"

    # ─── Captions ───

    async def generate_caption(
        self,
        location: str,
        country: str,
        existing_content: str | None = None,
    ) -> str:
        prompt = f"Write a photo caption for a travel moment in {location}, {country}."
        if existing_content:
            prompt += f"\n\nContext from the journal entry:\n{existing_content[:ENTRY_CONTENT_CHARS]}"

        raw_text = await self.llm.complete(
            system=CAPTION_SYSTEM_PROMPT,
            user=prompt,
            max_tokens=150,
            temperature=0.9,
        )
        return re.sub(r"^[\"']|[\"']$", "", raw_text.strip())

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)


trip_intelligence = TripIntelligenceService()
