from http import HTTPStatus

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import IpNotFoundError, ReservedIpError, UsageLimitReachedError
from iplocate.models.request_models import Provider, ProviderRequest


class IpData(BaseIPLookupClient):
    """Client for the https://ipdata.co API."""

    provider = Provider.ipdata
    base_url = "https://api.ipdata.co"
    supports_batch = True
    requires_api_key = True
    status_errors = {
        # ipdata answers 400 for private and reserved addresses.
        HTTPStatus.BAD_REQUEST: ReservedIpError,
        HTTPStatus.UNAUTHORIZED: UsageLimitReachedError,
        HTTPStatus.FORBIDDEN: UsageLimitReachedError,
        HTTPStatus.TOO_MANY_REQUESTS: UsageLimitReachedError,
        HTTPStatus.NOT_FOUND: IpNotFoundError,
    }

    def _single_request(self, ip: str | None) -> ProviderRequest:
        path = [ip] if ip else []
        return self._request(*path, params={"api-key": self.config.api_key})

    def _batch_request(self, ips: list[str]) -> ProviderRequest:
        # The bulk endpoint takes a bare JSON array of addresses.
        return self._request("bulk", method="POST", params={"api-key": self.config.api_key}, json_body=list(ips))
