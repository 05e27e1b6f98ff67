"""Places router: thin HTTP surface over the place resolver."""

from fastapi import APIRouter, Depends, Query

from wanderlog.dependencies import get_place_resolver
from wanderlog.exceptions import ValidationError
from wanderlog.schemas.place import LocationBias
from wanderlog.services.place_resolver import (
    DEFAULT_BIAS_RADIUS_M,
    DEFAULT_NEARBY_RADIUS_M,
    PlaceResolver,
)

router = APIRouter()


@router.get("/reverse")
async def reverse_geocode(
    lat: float,
    lng: float,
    resolver: PlaceResolver = Depends(get_place_resolver),
):
    place = await resolver.resolve_by_coordinates(lat, lng)
    return place.model_dump(by_alias=True)


@router.get("/details/{place_id}")
async def place_details(
    place_id: str,
    resolver: PlaceResolver = Depends(get_place_resolver),
):
    place = await resolver.resolve_by_place_id(place_id)
    return place.model_dump(by_alias=True)


@router.get("/autocomplete")
async def autocomplete(
    q: str = "",
    lat: float | None = None,
    lng: float | None = None,
    radius: int = DEFAULT_BIAS_RADIUS_M,
    session_token: str | None = Query(None, alias="sessionToken"),
    resolver: PlaceResolver = Depends(get_place_resolver),
):
    """Predictions for a partial query, optionally biased around a point.

    The session token is echoed back so the client can continue the
    session on the next keystroke.
    """
    if (lat is None) != (lng is None):
        raise ValidationError("lat and lng must be supplied together")

    bias = LocationBias(lat=lat, lng=lng, radius=radius) if lat is not None else None
    token = session_token or resolver.new_session_token()
    predictions = await resolver.search_by_text(q, bias=bias, session_token=token)
    return {
        "predictions": [p.model_dump(by_alias=True) for p in predictions],
        "sessionToken": token,
    }


@router.get("/nearby")
async def nearby(
    lat: float,
    lng: float,
    radius: int = DEFAULT_NEARBY_RADIUS_M,
    category: str | None = None,
    resolver: PlaceResolver = Depends(get_place_resolver),
):
    places = await resolver.search_nearby(lat, lng, radius=radius, category=category)
    return {"places": [p.model_dump(by_alias=True) for p in places]}
