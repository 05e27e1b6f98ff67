"""Redis cache service for short-lived AI results (itineraries)."""

import hashlib
import json
import logging
from typing import Any

import redis.asyncio as redis

from wanderlog.config import settings

logger = logging.getLogger(__name__)

TTL_ITINERARY = settings.ai_cache_ttl_hours * 60 * 60
KEY_PREFIX = "wanderlog"


class CacheService:
    """Redis-backed cache with typed TTLs. Fails open when Redis is unavailable."""

    def __init__(self, url: str | None = None, prefix: str = KEY_PREFIX):
        self._url = url or settings.redis_url
        self._prefix = prefix
        self._redis: redis.Redis | None = None

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def _get_redis(self) -> redis.Redis | None:
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    self._url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, cache disabled: {e}")
                self._redis = None
                return None
        return self._redis

    async def get(self, key: str) -> Any | None:
        """Get a value from cache. Returns None on miss or error."""
        try:
            r = await self._get_redis()
            if r is None:
                return None
            raw = await r.get(self._key(key))
            if raw is None:
                return None
            return json.loads(raw)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = TTL_ITINERARY) -> bool:
        """Set a value in cache with TTL. Returns False on error."""
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.set(self._key(key), json.dumps(value, default=str), ex=ttl)
            return True
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False

    # Typed helpers

    def itinerary_key(
        self,
        destination: str,
        country: str,
        duration_days: int,
        start_date: str,
        budget_tier: str,
        interests: list[str],
    ) -> str:
        interests_digest = hashlib.sha1(
            ",".join(sorted(i.strip().lower() for i in interests)).encode()
        ).hexdigest()[:12]
        return (
            f"itinerary:{destination.strip().lower()}:{country.strip().lower()}:"
            f"{duration_days}:{start_date}:{budget_tier}:{interests_digest}"
        )

    async def get_itinerary(self, key: str) -> dict | None:
        return await self.get(key)

    async def set_itinerary(self, key: str, data: dict):
        await self.set(key, data, TTL_ITINERARY)

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None


cache_service = CacheService()
