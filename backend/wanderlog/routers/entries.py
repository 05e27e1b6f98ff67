"""Entries router: tag a journal entry with a resolved place."""

import logging

from fastapi import APIRouter, Depends

from wanderlog.dependencies import get_place_resolver, get_record_store
from wanderlog.exceptions import NotFound, Unauthorized, ValidationError
from wanderlog.schemas.trip import TagEntryLocationRequest
from wanderlog.services.place_resolver import PlaceResolver
from wanderlog.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/{entry_id}/location")
async def tag_entry_location(
    entry_id: str,
    req: TagEntryLocationRequest,
    store: RecordStore = Depends(get_record_store),
    resolver: PlaceResolver = Depends(get_place_resolver),
):
    """Resolve a place from coordinates or a place id and store it on the entry.

    A place id wins when both are given.
    """
    has_coords = req.lat is not None and req.lng is not None
    if not req.user_id:
        raise ValidationError("Missing userId")
    if not req.place_id and not has_coords:
        raise ValidationError("Provide either lat and lng or placeId")

    entry = await store.get_entry(entry_id)
    if not entry:
        raise NotFound("Entry not found")
    if entry.user_id != req.user_id:
        raise Unauthorized("Unauthorized")

    if req.place_id:
        place = await resolver.resolve_by_place_id(req.place_id)
    else:
        place = await resolver.resolve_by_coordinates(req.lat, req.lng)

    updated = await store.set_entry_place(entry_id, place.model_dump(by_alias=True))
    if updated is None:
        raise NotFound("Entry not found")

    logger.info(f"Entry {entry_id} tagged with {place.name}")
    return {"entry": updated.model_dump(by_alias=True, mode="json")}
