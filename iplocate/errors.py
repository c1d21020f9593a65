from enum import Enum


class ErrorKind(str, Enum):
    """Provider-independent classification of lookup failures."""

    config = "config_error"
    transport = "transport_error"
    usage_limit_reached = "usage_limit_reached"
    not_found = "not_found"
    reserved_address = "reserved_address"
    parse = "parse_error"
    other = "other_provider_error"


class AppError(Exception):
    """Base application error for the IP geolocation service."""


class IpProviderError(AppError):
    """Base error for IP geolocation provider failures."""

    kind: ErrorKind


class ConfigError(IpProviderError):
    """Raised when the client configuration prevents building a request."""

    kind = ErrorKind.config


class TransportError(IpProviderError):
    """Raised when the provider could not be reached (network failure, timeout)."""

    kind = ErrorKind.transport


class UsageLimitReachedError(IpProviderError):
    """Raised when the provider rejects the credentials or the quota is exhausted."""

    kind = ErrorKind.usage_limit_reached


class IpNotFoundError(IpProviderError):
    """Raised when no geolocation information is found for the IP."""

    kind = ErrorKind.not_found


class ReservedIpError(IpProviderError):
    """Raised when the supplied IP address is reserved/private (e.g. 127.0.0.1, 192.168.x.x)."""

    kind = ErrorKind.reserved_address


class ParseError(IpProviderError):
    """Raised when a provider response does not match the expected schema."""

    kind = ErrorKind.parse


class OtherProviderError(IpProviderError):
    """Raised for provider status codes that have no dedicated mapping."""

    kind = ErrorKind.other

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"IP provider returned HTTP {status_code}")
