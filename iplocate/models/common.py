from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LocationAttribute(str, Enum):
    """Closed set of optional attributes a provider may report for an IP."""

    hostname = "hostname"
    continent = "continent"
    continent_code = "continent_code"
    country = "country"
    country_code = "country_code"
    region = "region"
    region_code = "region_code"
    city = "city"
    postal_code = "postal_code"
    district = "district"
    timezone = "timezone"
    isp = "isp"


class Coordinates(BaseModel):
    """Latitude/longitude pair in degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class IPLocation(BaseModel):
    """Normalized geolocation data returned by an IP provider.

    Only the attributes carried by the provider payload are present in
    `attributes`; a present attribute maps to None when the provider sent an
    explicit null or empty value for it. Unknown attribute keys are rejected
    by validation, so the key set stays provider-independent.
    """

    model_config = ConfigDict(frozen=True)

    ip: str
    coordinates: Coordinates
    attributes: dict[LocationAttribute, str | None] = Field(default_factory=dict)

    @property
    def latitude(self) -> float:
        return self.coordinates.latitude

    @property
    def longitude(self) -> float:
        return self.coordinates.longitude

    def get(self, attribute: LocationAttribute) -> str | None:
        """Return the value for `attribute`, or None when absent."""
        return self.attributes.get(attribute)

    def __str__(self) -> str:
        info = {attribute.value: value for attribute, value in self.attributes.items()}
        return f"{{lat={self.latitude}, lng={self.longitude}, info={info}}}"
