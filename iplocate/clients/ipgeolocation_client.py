from http import HTTPStatus

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import IpNotFoundError, ReservedIpError, UsageLimitReachedError
from iplocate.models.request_models import Provider, ProviderRequest


class IpGeolocationIo(BaseIPLookupClient):
    """Client for the https://ipgeolocation.io IP geolocation API.

    Single lookups pass the target IP as the `ip` query parameter; batch
    lookups POST `{"ips": [...]}` to the bulk endpoint. Latitude and longitude
    come back as strings.
    """

    provider = Provider.ipgeolocation
    base_url = "https://api.ipgeolocation.io"
    supports_batch = True
    requires_api_key = True
    status_errors = {
        # Invalid/expired key, paused or inactive subscription, paid feature on a
        # free plan, or the request limit has been exceeded.
        HTTPStatus.BAD_REQUEST: UsageLimitReachedError,
        HTTPStatus.UNAUTHORIZED: UsageLimitReachedError,
        # Queried IP address or domain is not in the provider's database.
        HTTPStatus.NOT_FOUND: IpNotFoundError,
        # Bogon (private, multicast, ...) address.
        HTTPStatus.LOCKED: ReservedIpError,
    }

    def _single_request(self, ip: str | None) -> ProviderRequest:
        params = self._common_params()
        params["ip"] = ip
        return self._request("ipgeo", params=params)

    def _batch_request(self, ips: list[str]) -> ProviderRequest:
        return self._request("ipgeo-bulk", method="POST", params=self._common_params(), json_body={"ips": ips})

    def _common_params(self) -> dict[str, str | None]:
        return {
            "apiKey": self.config.api_key,
            "lang": self.config.locale,
            "include": "hostname" if self.config.hostname_lookup else None,
        }
