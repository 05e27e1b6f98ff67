"""Domain exceptions shared by services and routers.

Each exception carries the HTTP status it maps to at the API boundary;
``main.py`` renders them as ``{"error": ..., "details": ...}``.
"""


class WanderlogError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(WanderlogError):
    """Bad or missing caller input. Raised before any provider call."""

    status_code = 400


class InvalidCoordinates(ValidationError):
    def __init__(self, lat: float, lng: float):
        self.lat = lat
        self.lng = lng
        super().__init__(
            "Invalid coordinates",
            f"lat={lat}, lng={lng} (lat must be in [-90, 90], lng in [-180, 180])",
        )


class NotFound(WanderlogError):
    status_code = 404


class Unauthorized(WanderlogError):
    """Requesting user does not own the record."""

    status_code = 403


class ProviderError(WanderlogError):
    """Geocoding/places provider returned a non-success status."""

    def __init__(self, status: str, details: str | None = None):
        self.status = status
        super().__init__(f"Places provider error: {status}", details)


class ModelUnavailable(WanderlogError):
    """The language model call itself failed (auth, quota, transport)."""


class ModelOutputUnparsable(WanderlogError):
    """The model replied but the content did not match the requested schema."""
