from enum import Enum
from ipaddress import ip_address
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Provider(str, Enum):
    """Supported IP geolocation providers."""

    ipstack = "ipstack"
    ipdata = "ipdata"
    ipinfo = "ipinfo"
    ipapi = "ipapi"
    ipgeolocation = "ipgeolocation"


def _validate_ip_literal(value: Any) -> str | None:
    """Validate that value is either empty/None or a valid IP address (IPv4 or IPv6).

    - None or blank string -> treated as None (client IP lookup, no error).
    - Non-blank -> must be a valid IP literal, otherwise a validation error is raised.
    """
    if value is None:
        return None

    value_str = str(value).strip()
    if not value_str:
        return None

    try:
        ip_address(value_str)
    except ValueError as exc:
        raise ValueError("ip must be a valid IPv4 or IPv6 address") from exc

    return value_str


class ProviderConfig(BaseModel):
    """Per-client lookup settings, fixed for the lifetime of a client.

    `target_ips` set to None (or an empty list) means the provider resolves
    the address the request comes from.
    """

    model_config = ConfigDict(frozen=True)

    target_ips: list[str] | None = Field(
        default=None,
        description="IPv4 or IPv6 addresses to look up. If omitted, the caller's own address is used.",
        examples=[["8.8.8.8"], ["8.8.8.8", "2001:4860:4860::8888"]],
    )
    api_key: str | None = None
    locale: str = "en"
    hostname_lookup: bool = False
    timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("target_ips", mode="before")
    @classmethod
    def _validate_target_ips(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        ips = [ip for ip in (_validate_ip_literal(item) for item in value) if ip]
        return ips or None

    @field_validator("locale")
    @classmethod
    def _normalize_locale(cls, value: str) -> str:
        return value.strip().lower() or "en"


class ProviderRequest(BaseModel):
    """Transport-agnostic description of the HTTP call to a provider."""

    model_config = ConfigDict(frozen=True)

    method: Literal["GET", "POST"] = "GET"
    url: str
    params: dict[str, str] = Field(default_factory=dict)
    json_body: Any = None
    timeout_seconds: float = 5.0
    batch: bool = False


class IPLookupRequest(BaseModel):
    """Request model for IP geolocation lookup via query parameters.

    If `ip` is provided, the service will look up that explicit IP address.
    If `ip` is omitted or null, the provider resolves the address of this service.

    The optional `provider` parameter allows the caller to select the upstream
    geolocation provider. If omitted, the service's configured default is used.
    """

    ip: str | None = Field(
        default=None,
        description="IPv4 or IPv6 address to look up. If omitted, the client's IP is used.",
        examples=["8.8.8.8", "2001:4860:4860::8888"],
    )
    provider: Provider | None = Field(
        default=None,
        description="Upstream provider to use for the lookup. Defaults to IPLOCATE_DEFAULT_PROVIDER (ipapi).",
        examples=["ipapi", "ipgeolocation"],
    )

    @field_validator("ip", mode="before")
    @classmethod
    def _validate_ip(cls, value: str | None) -> str | None:
        return _validate_ip_literal(value)


class IPBatchLookupRequest(BaseModel):
    """Request body for a batch lookup of several IP addresses."""

    ips: list[str] = Field(min_length=1, examples=[["8.8.8.8", "1.1.1.1"]])
    provider: Provider = Provider.ipgeolocation

    @field_validator("ips", mode="before")
    @classmethod
    def _validate_ips(cls, value: Any) -> list[str]:
        return [ip for ip in (_validate_ip_literal(item) for item in value or []) if ip]
