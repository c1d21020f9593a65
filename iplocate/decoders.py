"""Decoding of provider payloads into the normalized IPLocation record.

The payload carries no marker of the schema it follows, so the provider is
always passed explicitly next to the raw body and selects the routine used.
"""

import json
from collections.abc import Callable
from typing import Any

from iplocate.errors import ParseError
from iplocate.models.common import Coordinates, IPLocation, LocationAttribute
from iplocate.models.request_models import Provider

# LocationAttribute -> field name in the provider's JSON payload.
IPSTACK_FIELDS: dict[LocationAttribute, str] = {
    LocationAttribute.hostname: "hostname",
    LocationAttribute.continent: "continent_name",
    LocationAttribute.continent_code: "continent_code",
    LocationAttribute.country: "country_name",
    LocationAttribute.country_code: "country_code",
    LocationAttribute.region: "region_name",
    LocationAttribute.region_code: "region_code",
}

IPDATA_FIELDS: dict[LocationAttribute, str] = {
    LocationAttribute.continent: "continent_name",
    LocationAttribute.continent_code: "continent_code",
    LocationAttribute.country: "country_name",
    LocationAttribute.country_code: "country_code",
    LocationAttribute.region: "region",
    LocationAttribute.region_code: "region_code",
    LocationAttribute.city: "city",
    LocationAttribute.postal_code: "postal",
}

IPINFO_FIELDS: dict[LocationAttribute, str] = {
    LocationAttribute.country: "country",
    LocationAttribute.region: "region",
    LocationAttribute.postal_code: "postal",
}

IPAPI_FIELDS: dict[LocationAttribute, str] = {
    LocationAttribute.continent: "continent",
    LocationAttribute.continent_code: "continentCode",
    LocationAttribute.country: "country",
    LocationAttribute.country_code: "countryCode",
    LocationAttribute.region: "region",
    LocationAttribute.region_code: "regionCode",
    LocationAttribute.city: "city",
    LocationAttribute.postal_code: "zip",
    LocationAttribute.district: "district",
    LocationAttribute.timezone: "timezone",
    LocationAttribute.isp: "isp",
}

IPGEOLOCATION_FIELDS: dict[LocationAttribute, str] = {
    LocationAttribute.hostname: "hostname",
    LocationAttribute.continent: "continent_name",
    LocationAttribute.continent_code: "continent_code",
    LocationAttribute.country: "country_name",
    LocationAttribute.country_code: "country_code2",
    LocationAttribute.city: "city",
    LocationAttribute.postal_code: "zipcode",
    LocationAttribute.district: "district",
    LocationAttribute.isp: "isp",
}


def decode(payload: bytes | str, provider: Provider | str | None) -> IPLocation:
    """Decode a single provider response body into an IPLocation.

    Raises ParseError when the provider is missing or unknown, when the body
    is not a JSON object, or when a mandatory field is missing or malformed.
    """
    decoder = _decoder_for(provider)
    data = _load_json(payload)
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object from {provider}, got {type(data).__name__}")
    return decoder(data)


def decode_batch(payload: bytes | str, provider: Provider | str | None) -> list[IPLocation]:
    """Decode a batch response (a JSON array of per-IP objects)."""
    decoder = _decoder_for(provider)
    data = _load_json(payload)
    if not isinstance(data, list):
        raise ParseError(f"Expected a JSON array from {provider}, got {type(data).__name__}")

    locations = []
    for item in data:
        if not isinstance(item, dict):
            raise ParseError(f"Expected a JSON object in batch response, got {type(item).__name__}")
        locations.append(decoder(item))
    return locations


def parse_degrees(value: str) -> float:
    """Parse a decimal string into degrees, falling back to 0.0 when unparseable.

    Stricter than float(): surrounding whitespace and digit-group underscores
    make the value unparseable, so "10.0, 20.0" yields a 0.0 longitude.
    """
    if value != value.strip() or "_" in value:
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0


def split_coordinates(value: str) -> Coordinates:
    """Parse a combined "lat,lng" string.

    Latitude is the first component and longitude the last; malformed
    components become 0.0 instead of failing.
    """
    parts = value.split(",")
    return Coordinates(latitude=parse_degrees(parts[0]), longitude=parse_degrees(parts[-1]))


def _decoder_for(provider: Provider | str | None) -> Callable[[dict[str, Any]], IPLocation]:
    if provider is None:
        raise ParseError("Missing provider for response decoding")
    try:
        resolved = Provider(provider)
    except ValueError as exc:
        raise ParseError(f"Unsupported provider for response decoding: {provider!r}") from exc
    return _DECODERS[resolved]


def _load_json(payload: bytes | str) -> Any:
    try:
        return json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Failed to decode IP provider response as JSON: {exc}") from exc


def _required_ip(data: dict[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str):
        raise ParseError(f"Missing or invalid '{field}' field in provider response")
    return value


def _required_number(data: dict[str, Any], field: str) -> float:
    value = data.get(field)
    # bool is an int subclass but never a valid coordinate.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"Missing or non-numeric '{field}' field in provider response")
    return float(value)


def _required_string_number(data: dict[str, Any], field: str) -> float:
    value = data.get(field)
    if isinstance(value, str):
        return parse_degrees(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"Missing or invalid '{field}' field in provider response")
    return float(value)


def _attributes(data: dict[str, Any], fields: dict[LocationAttribute, str]) -> dict[LocationAttribute, str | None]:
    """Collect the optional attributes present in the payload.

    Fields absent from the payload are left out; explicit null or empty
    values are kept as None.
    """
    attributes: dict[LocationAttribute, str | None] = {}
    for attribute, field in fields.items():
        if field not in data:
            continue
        value = data[field]
        if value is None or isinstance(value, str):
            attributes[attribute] = value or None
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            attributes[attribute] = str(value)
        else:
            raise ParseError(f"Unexpected value for '{field}' in provider response: {value!r}")
    return attributes


def _decode_ipstack(data: dict[str, Any]) -> IPLocation:
    return IPLocation(
        ip=_required_ip(data, "ip"),
        coordinates=Coordinates(
            latitude=_required_number(data, "latitude"),
            longitude=_required_number(data, "longitude"),
        ),
        attributes=_attributes(data, IPSTACK_FIELDS),
    )


def _decode_ipdata(data: dict[str, Any]) -> IPLocation:
    return IPLocation(
        ip=_required_ip(data, "ip"),
        coordinates=Coordinates(
            latitude=_required_number(data, "latitude"),
            longitude=_required_number(data, "longitude"),
        ),
        attributes=_attributes(data, IPDATA_FIELDS),
    )


def _decode_ipinfo(data: dict[str, Any]) -> IPLocation:
    loc = data.get("loc")
    if not isinstance(loc, str):
        raise ParseError("Missing or invalid 'loc' field in provider response")

    return IPLocation(
        ip=_required_ip(data, "ip"),
        coordinates=split_coordinates(loc),
        attributes=_attributes(data, IPINFO_FIELDS),
    )


def _decode_ipapi(data: dict[str, Any]) -> IPLocation:
    # ip-api.com reports the queried address under "query".
    return IPLocation(
        ip=_required_ip(data, "query"),
        coordinates=Coordinates(
            latitude=_required_number(data, "lat"),
            longitude=_required_number(data, "lon"),
        ),
        attributes=_attributes(data, IPAPI_FIELDS),
    )


def _decode_ipgeolocation(data: dict[str, Any]) -> IPLocation:
    # ipgeolocation.io encodes coordinates as strings.
    return IPLocation(
        ip=_required_ip(data, "ip"),
        coordinates=Coordinates(
            latitude=_required_string_number(data, "latitude"),
            longitude=_required_string_number(data, "longitude"),
        ),
        attributes=_attributes(data, IPGEOLOCATION_FIELDS),
    )


_DECODERS: dict[Provider, Callable[[dict[str, Any]], IPLocation]] = {
    Provider.ipstack: _decode_ipstack,
    Provider.ipdata: _decode_ipdata,
    Provider.ipinfo: _decode_ipinfo,
    Provider.ipapi: _decode_ipapi,
    Provider.ipgeolocation: _decode_ipgeolocation,
}
