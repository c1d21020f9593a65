from pydantic import BaseModel

from iplocate.models.common import IPLocation
from iplocate.models.request_models import Provider


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class IPLookupResponse(BaseModel):
    """Response model for IP geolocation lookup."""

    provider: Provider
    ip: str
    latitude: float
    longitude: float
    attributes: dict[str, str | None] = {}

    @classmethod
    def from_location(cls, provider: Provider, location: IPLocation) -> "IPLookupResponse":
        return cls(
            provider=provider,
            ip=location.ip,
            latitude=location.latitude,
            longitude=location.longitude,
            attributes={attribute.value: value for attribute, value in location.attributes.items()},
        )
