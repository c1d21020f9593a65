from http import HTTPStatus
from typing import Any

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import IpNotFoundError, IpProviderError, OtherProviderError, UsageLimitReachedError
from iplocate.models.request_models import Provider, ProviderRequest

# ipstack error codes, reported as {"success": false, "error": {"code": ...}} with HTTP 200.
# 101 missing/invalid access key, 102 inactive account, 104 monthly limit, 105 plan restriction.
IPSTACK_USAGE_ERROR_CODES = frozenset({101, 102, 104, 105})
IPSTACK_NOT_FOUND_CODE = 106


class IpStack(BaseIPLookupClient):
    """Client for the https://ipstack.com API.

    The free plan is only served over plain HTTP. The caller's own address is
    resolved through the `/check` endpoint.
    """

    provider = Provider.ipstack
    base_url = "http://api.ipstack.com"
    requires_api_key = True
    status_errors = {
        HTTPStatus.UNAUTHORIZED: UsageLimitReachedError,
        HTTPStatus.FORBIDDEN: UsageLimitReachedError,
        HTTPStatus.TOO_MANY_REQUESTS: UsageLimitReachedError,
        HTTPStatus.NOT_FOUND: IpNotFoundError,
    }

    def _single_request(self, ip: str | None) -> ProviderRequest:
        params = {
            "access_key": self.config.api_key,
            "language": self.config.locale,
            # Hostname resolution is opt-in on ipstack.
            "hostname": "1" if self.config.hostname_lookup else None,
        }
        return self._request(ip or "check", params=params)

    def _payload_error(self, data: dict[str, Any]) -> IpProviderError | None:
        error = data.get("error")
        if data.get("success") is not False or not isinstance(error, dict):
            return None

        code = error.get("code")
        message = str(error.get("info") or error.get("type") or f"ipstack error {code}")

        if code in IPSTACK_USAGE_ERROR_CODES:
            return UsageLimitReachedError(message)
        if code == IPSTACK_NOT_FOUND_CODE:
            return IpNotFoundError(message)
        return OtherProviderError(HTTPStatus.OK, message)
