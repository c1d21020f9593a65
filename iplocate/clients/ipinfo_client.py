from http import HTTPStatus
from typing import Any

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import IpNotFoundError, IpProviderError, ReservedIpError, UsageLimitReachedError
from iplocate.models.request_models import Provider, ProviderRequest


class IpInfo(BaseIPLookupClient):
    """Client for the https://ipinfo.io API.

    A token is optional; anonymous requests share a small monthly quota.
    Coordinates are returned as a single "lat,lng" string in `loc`.
    """

    provider = Provider.ipinfo
    base_url = "https://ipinfo.io"
    status_errors = {
        HTTPStatus.FORBIDDEN: UsageLimitReachedError,
        HTTPStatus.TOO_MANY_REQUESTS: UsageLimitReachedError,
        HTTPStatus.NOT_FOUND: IpNotFoundError,
    }

    def _single_request(self, ip: str | None) -> ProviderRequest:
        path = [ip, "json"] if ip else ["json"]
        return self._request(*path, params={"token": self.config.api_key})

    def _payload_error(self, data: dict[str, Any]) -> IpProviderError | None:
        # Private and reserved addresses come back as {"ip": ..., "bogon": true}.
        if data.get("bogon") is True:
            return ReservedIpError(f"{data.get('ip') or 'Address'} is a bogon address")
        return None
