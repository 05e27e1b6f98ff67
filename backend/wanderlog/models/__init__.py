from wanderlog.models.user import UserProfile
from wanderlog.models.trip import ENTRY_CATEGORIES, Entry, Trip
from wanderlog.models.recommendation import RecommendationCache, recommendation_cache_path

__all__ = [
    "ENTRY_CATEGORIES",
    "Entry",
    "RecommendationCache",
    "Trip",
    "UserProfile",
    "recommendation_cache_path",
]
