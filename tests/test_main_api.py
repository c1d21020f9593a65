from fastapi.testclient import TestClient

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import (
    ConfigError,
    IpNotFoundError,
    OtherProviderError,
    ReservedIpError,
    TransportError,
    UsageLimitReachedError,
)
from iplocate.locator import get_ip_locator
from iplocate.main import app
from iplocate.models.common import Coordinates, IPLocation, LocationAttribute


class _ErrorRaisingLocator:
    """Test double for IPLocator that always raises a configured exception."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def lookup(self, client: BaseIPLookupClient) -> None:
        raise self._exc


class _RecordingLocator:
    """Test double for IPLocator returning one location per configured target."""

    def __init__(self) -> None:
        self.clients: list[BaseIPLookupClient] = []

    async def lookup(self, client: BaseIPLookupClient) -> IPLocation | list[IPLocation]:
        self.clients.append(client)
        ips = client.config.target_ips or ["203.0.113.7"]
        locations = [
            IPLocation(
                ip=ip,
                coordinates=Coordinates(latitude=37.4, longitude=-122.1),
                attributes={LocationAttribute.country_code: "US", LocationAttribute.city: None},
            )
            for ip in ips
        ]
        return locations if len(locations) > 1 else locations[0]


def _call_lookup_with_error(exc: Exception) -> tuple[int, dict]:
    """Helper that wires a failing locator and calls the /v1/ip/lookup endpoint."""
    app.dependency_overrides[get_ip_locator] = lambda: _ErrorRaisingLocator(exc)
    client = TestClient(app)
    try:
        response = client.get("/v1/ip/lookup?ip=8.8.8.8&provider=ipinfo")
        return response.status_code, response.json()
    finally:
        app.dependency_overrides.clear()


def test_health() -> None:
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ip_lookup_returns_normalized_location() -> None:
    locator = _RecordingLocator()
    app.dependency_overrides[get_ip_locator] = lambda: locator
    try:
        response = TestClient(app).get("/v1/ip/lookup?ip=8.8.8.8&provider=ipgeolocation")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == {
        "provider": "ipgeolocation",
        "ip": "8.8.8.8",
        "latitude": 37.4,
        "longitude": -122.1,
        "attributes": {"country_code": "US", "city": None},
    }
    assert locator.clients[0].provider.value == "ipgeolocation"
    assert locator.clients[0].config.target_ips == ["8.8.8.8"]


def test_ip_lookup_without_ip_is_a_self_lookup() -> None:
    locator = _RecordingLocator()
    app.dependency_overrides[get_ip_locator] = lambda: locator
    try:
        response = TestClient(app).get("/v1/ip/lookup")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert locator.clients[0].config.target_ips is None


def test_batch_lookup_returns_all_locations() -> None:
    locator = _RecordingLocator()
    app.dependency_overrides[get_ip_locator] = lambda: locator
    try:
        response = TestClient(app).post(
            "/v1/ip/batch", json={"ips": ["8.8.8.8", "1.1.1.1"], "provider": "ipgeolocation"}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert [item["ip"] for item in response.json()] == ["8.8.8.8", "1.1.1.1"]


def test_ip_lookup_rejects_invalid_ip() -> None:
    response = TestClient(app).get("/v1/ip/lookup?ip=qwerty")

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_ip"


def test_batch_lookup_rejects_invalid_ip() -> None:
    response = TestClient(app).post("/v1/ip/batch", json={"ips": ["qwerty"]})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_ip"


def test_ip_lookup_maps_reserved_ip_error_to_400() -> None:
    status_code, body = _call_lookup_with_error(ReservedIpError("Reserved IP Address"))

    assert status_code == 400
    assert body["code"] == "reserved_ip"
    assert body["provider"] == "ipinfo"
    assert "Reserved IP Address" in body["message"]


def test_ip_lookup_maps_ip_not_found_error_to_404() -> None:
    status_code, body = _call_lookup_with_error(
        IpNotFoundError("No geolocation information found for this IP address.")
    )

    assert status_code == 404
    assert body["code"] == "ip_not_found"


def test_ip_lookup_maps_usage_limit_error_to_429() -> None:
    status_code, body = _call_lookup_with_error(UsageLimitReachedError("Quota exceeded"))

    assert status_code == 429
    assert body["code"] == "usage_limit_reached"


def test_ip_lookup_maps_transport_error_to_502() -> None:
    status_code, body = _call_lookup_with_error(TransportError("Network failure"))

    assert status_code == 502
    assert body["code"] == "upstream_unreachable"


def test_ip_lookup_maps_other_provider_error_to_502_with_upstream_status() -> None:
    status_code, body = _call_lookup_with_error(OtherProviderError(503, "Upstream failure"))

    assert status_code == 502
    assert body["code"] == "upstream_error"
    assert body["upstream_status"] == 503
    assert "Upstream failure" in body["message"]


def test_ip_lookup_maps_config_error_to_500() -> None:
    status_code, body = _call_lookup_with_error(ConfigError("An API key is required for ipinfo"))

    assert status_code == 500
    assert body["code"] == "configuration_error"
