"""Maps credential loader: resolved once per process, single-flight.

Concurrent callers share one in-flight load. A successful load is memoized
for the life of the process; a failed load is not, so the next caller
starts a fresh attempt.
"""

import asyncio
import logging

import httpx

from wanderlog.config import settings
from wanderlog.exceptions import ProviderError

logger = logging.getLogger(__name__)


class MapsCredentialLoader:
    def __init__(
        self,
        api_key: str | None = None,
        key_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._configured_key = settings.google_maps_api_key if api_key is None else api_key
        self._key_url = settings.google_maps_key_url if key_url is None else key_url
        self._client = client
        self._api_key: str | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key or self._configured_key or self._key_url)

    async def get_api_key(self) -> str:
        if self._api_key:
            return self._api_key

        task = self._inflight
        if task is None:
            task = asyncio.create_task(self._load())
            self._inflight = task

        try:
            key = await asyncio.shield(task)
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

        self._api_key = key
        return key

    async def _load(self) -> str:
        if self._configured_key:
            return self._configured_key
        if not self._key_url:
            raise ProviderError("not_configured", "GOOGLE_MAPS_API_KEY is not set")

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=settings.maps_timeout_seconds)
            close_client = True

        try:
            resp = await client.get(self._key_url)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Maps key broker returned {e.response.status_code}")
            raise ProviderError("credential", f"Key broker returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Maps key broker unreachable: {e}")
            raise ProviderError("transport", str(e)) from e
        except ValueError as e:
            raise ProviderError("credential", "Key broker returned invalid JSON") from e
        finally:
            if close_client:
                await client.aclose()

        if data.get("error"):
            raise ProviderError("credential", str(data["error"]))
        key = data.get("apiKey")
        if not key:
            raise ProviderError("credential", "Key broker returned no apiKey")

        logger.info("Maps API key loaded from key broker")
        return key


maps_credentials = MapsCredentialLoader()
