from http import HTTPStatus
from typing import Any

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import (
    ConfigError,
    IpNotFoundError,
    IpProviderError,
    OtherProviderError,
    ReservedIpError,
    UsageLimitReachedError,
)
from iplocate.models.request_models import Provider, ProviderRequest

# ip-api.com only returns the fields it is asked for; continent and district
# are not part of the default set. It has no regionCode field ("region" already
# holds the code), so that attribute is never populated for this provider.
IPAPI_REQUESTED_FIELDS = (
    "status,message,continent,continentCode,country,countryCode,region,"
    "city,district,zip,lat,lon,timezone,isp,query"
)


class IpApiCom(BaseIPLookupClient):
    """Client for the http://ip-api.com JSON API.

    The free endpoint needs no key and is HTTP only; when a key is configured
    the pro endpoint is used instead. Failures such as private addresses are
    reported with HTTP 200 and `{"status": "fail", "message": ...}`.
    """

    provider = Provider.ipapi
    base_url = "http://ip-api.com"
    pro_base_url = "https://pro.ip-api.com"
    status_errors = {
        # 403 on the pro endpoint means an invalid key; 429 is the free rate limit.
        HTTPStatus.FORBIDDEN: UsageLimitReachedError,
        HTTPStatus.TOO_MANY_REQUESTS: UsageLimitReachedError,
        HTTPStatus.NOT_FOUND: IpNotFoundError,
    }

    def _single_request(self, ip: str | None) -> ProviderRequest:
        path = ["json", ip] if ip else ["json"]
        params = {
            "key": self.config.api_key,
            "lang": self.config.locale,
            "fields": IPAPI_REQUESTED_FIELDS,
        }
        base_url = self.pro_base_url if self.config.api_key else None
        return self._request(*path, params=params, base_url=base_url)

    def _payload_error(self, data: dict[str, Any]) -> IpProviderError | None:
        """Normalize ip-api.com status/message into domain errors."""
        if str(data.get("status") or "").lower() != "fail":
            return None

        message = str(data.get("message") or "Unknown error from ip-api.com")
        lower_msg = message.lower()

        if "private range" in lower_msg or "reserved range" in lower_msg:
            return ReservedIpError(message)

        if "quota" in lower_msg or "limit" in lower_msg:
            return UsageLimitReachedError(f"IP provider rate limit or quota exceeded: {message}")

        if "invalid query" in lower_msg:
            return ConfigError(f"ip-api.com rejected the queried address: {message}")

        if "not found" in lower_msg:
            return IpNotFoundError(message)

        return OtherProviderError(HTTPStatus.OK, message)
