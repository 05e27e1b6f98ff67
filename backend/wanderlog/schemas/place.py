from pydantic import BaseModel

from wanderlog.schemas.common import CamelModel


class Coordinates(BaseModel):
    lat: float
    lng: float


class PlaceDetails(CamelModel):
    name: str
    address: str = ""
    city: str = ""
    country: str = ""
    coordinates: Coordinates | None = None
    place_id: str | None = None
    types: list[str] = []
    establishment_name: str | None = None
    business_status: str | None = None
    rating: float | None = None
    photos: list[str] = []


class StructuredFormatting(CamelModel):
    main_text: str = ""
    secondary_text: str = ""


class AutocompletePrediction(CamelModel):
    description: str = ""
    place_id: str = ""
    structured_formatting: StructuredFormatting = StructuredFormatting()
    types: list[str] = []


class LocationBias(BaseModel):
    lat: float
    lng: float
    radius: int = 50_000
