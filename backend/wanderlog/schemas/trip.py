from datetime import date, datetime

from wanderlog.schemas.common import CamelModel


class TripData(CamelModel):
    id: str
    user_id: str
    name: str
    description: str | None = None
    status: str = "draft"
    entry_ids: list[str] = []
    countries_visited: list[str] = []
    start_date: date | None = None
    end_date: date | None = None
    updated_at: datetime | None = None

    model_config = {**CamelModel.model_config, "from_attributes": True}


class EntryData(CamelModel):
    id: str
    user_id: str
    trip_id: str | None = None
    title: str = ""
    content: str = ""
    entry_date: datetime | None = None
    location: str = ""
    country: str = ""
    latitude: float | None = None
    longitude: float | None = None
    media_urls: list[str] = []
    category: str = "journal"
    place: dict | None = None

    model_config = {**CamelModel.model_config, "from_attributes": True}


class ProfileData(CamelModel):
    id: str
    display_name: str = ""
    interests: list[str] = []
    favorite_places: list[str] = []
    languages_spoken: list[str] = []
    stats: dict = {}
    preferences: dict = {}

    model_config = {**CamelModel.model_config, "from_attributes": True}


class TagEntryLocationRequest(CamelModel):
    user_id: str | None = None
    lat: float | None = None
    lng: float | None = None
    place_id: str | None = None
