"""Place resolver: adapter for Google Maps geocoding and places web services.

Turns the provider's heterogeneous payloads (geocoder results, place
details, autocomplete predictions, nearby search results) into the single
PlaceDetails / AutocompletePrediction shape the rest of the app stores.

Every call is single-shot. Provider quota is billed per request, so retries
are left to the caller.
"""

import logging
import uuid

import httpx

from wanderlog.config import settings
from wanderlog.exceptions import InvalidCoordinates, NotFound, ProviderError, ValidationError
from wanderlog.schemas.place import (
    AutocompletePrediction,
    Coordinates,
    LocationBias,
    PlaceDetails,
    StructuredFormatting,
)
from wanderlog.services.geo import is_valid_coordinates
from wanderlog.services.maps_loader import MapsCredentialLoader, maps_credentials

logger = logging.getLogger(__name__)

DETAIL_FIELDS = (
    "name,formatted_address,geometry,place_id,types,"
    "business_status,rating,photos,address_components"
)
PHOTO_MAX_PX = 400
DEFAULT_BIAS_RADIUS_M = 50_000
MAX_BIAS_RADIUS_M = 50_000
DEFAULT_NEARBY_RADIUS_M = 5000
MAX_NEARBY_RADIUS_M = 50_000
MAX_NEARBY_RESULTS = 20

_NOT_FOUND_STATUSES = ("ZERO_RESULTS", "NOT_FOUND")


def _component(components: list[dict], type_: str) -> str | None:
    for comp in components:
        if type_ in (comp.get("types") or []):
            return comp.get("long_name")
    return None


def _city_from_components(components: list[dict]) -> str:
    return (
        _component(components, "locality")
        or _component(components, "administrative_area_level_1")
        or ""
    )


def _name_from_address(address: str) -> str:
    return address.split(",")[0].strip()


def _city_country_from_address(address: str) -> tuple[str, str]:
    """Best effort for results without address components: '..., City, Country'."""
    parts = [p.strip() for p in address.split(",")] if address else []
    city = parts[-2] if len(parts) >= 2 else ""
    country = parts[-1] if parts else ""
    return city, country


def _location(result: dict) -> Coordinates | None:
    loc = (result.get("geometry") or {}).get("location") or {}
    lat, lng = loc.get("lat"), loc.get("lng")
    if lat is None or lng is None or not is_valid_coordinates(lat, lng):
        return None
    return Coordinates(lat=lat, lng=lng)


class PlaceResolver:
    """Normalizes geocoding/places provider responses into PlaceDetails."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        credentials: MapsCredentialLoader | None = None,
        base_url: str | None = None,
    ):
        self._client = client
        self._credentials = credentials or maps_credentials
        self._base_url = (base_url or settings.google_maps_base_url).rstrip("/")

    @property
    def is_configured(self) -> bool:
        return self._credentials.is_configured

    @staticmethod
    def new_session_token() -> str:
        return uuid.uuid4().hex

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.maps_timeout_seconds)
        return self._client

    async def _request(self, path: str, params: dict) -> dict:
        api_key = await self._credentials.get_api_key()
        client = await self._get_client()
        try:
            resp = await client.get(f"{self._base_url}{path}", params={**params, "key": api_key})
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Places provider {path} returned HTTP {e.response.status_code}")
            raise ProviderError(f"HTTP_{e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Places provider {path} transport failure: {e}")
            raise ProviderError("transport", str(e)) from e
        except ValueError as e:
            logger.error(f"Places provider {path} returned invalid JSON")
            raise ProviderError("invalid_response") from e

    def _photo_url(self, photo_reference: str, api_key: str) -> str:
        url = httpx.URL(
            f"{self._base_url}/place/photo",
            params={
                "maxwidth": PHOTO_MAX_PX,
                "maxheight": PHOTO_MAX_PX,
                "photo_reference": photo_reference,
                "key": api_key,
            },
        )
        return str(url)

    # ─── Reverse geocoding ───

    async def resolve_by_coordinates(self, lat: float, lng: float) -> PlaceDetails:
        if not is_valid_coordinates(lat, lng):
            raise InvalidCoordinates(lat, lng)

        data = await self._request("/geocode/json", {"latlng": f"{lat},{lng}"})
        status = data.get("status", "UNKNOWN_ERROR")
        results = data.get("results") or []

        if status == "ZERO_RESULTS" or (status == "OK" and not results):
            raise NotFound("No place found at these coordinates", f"lat={lat}, lng={lng}")
        if status != "OK":
            logger.error(f"Reverse geocoding failed: {status}")
            raise ProviderError(status, data.get("error_message"))

        return self.from_geocoder_result(results[0], Coordinates(lat=lat, lng=lng))

    @staticmethod
    def from_geocoder_result(result: dict, coordinates: Coordinates) -> PlaceDetails:
        address = result.get("formatted_address") or ""
        components = result.get("address_components") or []
        types = result.get("types") or []
        derived_name = _name_from_address(address)

        return PlaceDetails(
            name=derived_name or "Unknown location",
            address=address,
            city=_city_from_components(components),
            country=_component(components, "country") or "",
            coordinates=coordinates,
            place_id=result.get("place_id"),
            types=types,
            establishment_name=(derived_name or None) if "establishment" in types else None,
        )

    # ─── Place details ───

    async def resolve_by_place_id(self, place_id: str) -> PlaceDetails:
        if not place_id or not place_id.strip():
            raise ValidationError("Invalid placeId", "placeId must be a non-empty string")

        data = await self._request(
            "/place/details/json", {"place_id": place_id, "fields": DETAIL_FIELDS}
        )
        status = data.get("status", "UNKNOWN_ERROR")

        if status in _NOT_FOUND_STATUSES:
            raise NotFound("Place not found", f"placeId={place_id}")
        if status != "OK":
            logger.error(f"Place details failed for {place_id}: {status}")
            raise ProviderError(status, data.get("error_message"))

        result = data.get("result")
        if not result:
            raise NotFound("Place not found", f"placeId={place_id}")

        api_key = await self._credentials.get_api_key()
        return self.from_place_result(result, api_key=api_key)

    def from_place_result(
        self,
        result: dict,
        api_key: str,
        fallback_coordinates: Coordinates | None = None,
    ) -> PlaceDetails:
        """Normalize a place details or nearby search result."""
        address = result.get("formatted_address") or result.get("vicinity") or ""
        components = result.get("address_components")
        if components:
            city = _city_from_components(components)
            country = _component(components, "country") or ""
        else:
            city, country = _city_country_from_address(address)

        photos = [
            self._photo_url(p["photo_reference"], api_key)
            for p in result.get("photos") or []
            if p.get("photo_reference")
        ]

        return PlaceDetails(
            name=result.get("name") or _name_from_address(address) or "Unknown",
            address=address,
            city=city,
            country=country,
            coordinates=_location(result) or fallback_coordinates,
            place_id=result.get("place_id"),
            types=result.get("types") or [],
            establishment_name=result.get("name"),
            business_status=result.get("business_status"),
            rating=result.get("rating"),
            photos=photos,
        )

    # ─── Autocomplete ───

    async def search_by_text(
        self,
        query: str,
        bias: LocationBias | None = None,
        session_token: str | None = None,
    ) -> list[AutocompletePrediction]:
        """Autocomplete predictions for a partial address or place name.

        A fresh session token is used unless the caller continues an
        ongoing session by passing its token.
        """
        if not query or not query.strip():
            return []
        if bias is not None:
            if not is_valid_coordinates(bias.lat, bias.lng):
                raise InvalidCoordinates(bias.lat, bias.lng)
            if not 0 < bias.radius <= MAX_BIAS_RADIUS_M:
                raise ValidationError("Invalid radius", f"radius must be in (0, {MAX_BIAS_RADIUS_M}] meters")

        params: dict = {
            "input": query,
            "sessiontoken": session_token or self.new_session_token(),
        }
        if bias is not None:
            params["location"] = f"{bias.lat},{bias.lng}"
            params["radius"] = bias.radius

        data = await self._request("/place/autocomplete/json", params)
        status = data.get("status", "UNKNOWN_ERROR")

        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            logger.error(f"Autocomplete failed for {query!r}: {status}")
            raise ProviderError(status, data.get("error_message"))

        return [
            AutocompletePrediction(
                description=p.get("description") or "",
                place_id=p.get("place_id") or "",
                structured_formatting=StructuredFormatting(
                    main_text=(p.get("structured_formatting") or {}).get("main_text") or "",
                    secondary_text=(p.get("structured_formatting") or {}).get("secondary_text") or "",
                ),
                types=p.get("types") or [],
            )
            for p in data.get("predictions") or []
        ]

    # ─── Nearby search ───

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        radius: int = DEFAULT_NEARBY_RADIUS_M,
        category: str | None = None,
    ) -> list[PlaceDetails]:
        if not is_valid_coordinates(lat, lng):
            raise InvalidCoordinates(lat, lng)
        if not 0 < radius <= MAX_NEARBY_RADIUS_M:
            raise ValidationError("Invalid radius", f"radius must be in (0, {MAX_NEARBY_RADIUS_M}] meters")

        params: dict = {"location": f"{lat},{lng}", "radius": radius}
        if category:
            params["type"] = category

        data = await self._request("/place/nearbysearch/json", params)
        status = data.get("status", "UNKNOWN_ERROR")

        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            logger.error(f"Nearby search failed at {lat},{lng}: {status}")
            raise ProviderError(status, data.get("error_message"))

        api_key = await self._credentials.get_api_key()
        origin = Coordinates(lat=lat, lng=lng)
        return [
            self.from_place_result(r, api_key=api_key, fallback_coordinates=origin)
            for r in (data.get("results") or [])[:MAX_NEARBY_RESULTS]
        ]

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


place_resolver = PlaceResolver()
