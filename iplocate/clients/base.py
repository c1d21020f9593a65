import json
from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import Any, ClassVar

import httpx

from iplocate import decoders
from iplocate.errors import ConfigError, IpProviderError, OtherProviderError
from iplocate.logger import get_logger
from iplocate.models.common import IPLocation
from iplocate.models.request_models import Provider, ProviderConfig, ProviderRequest

logger = get_logger("clients")


class BaseIPLookupClient(ABC):
    """Abstract base for all IP geolocation clients.

    A client knows how to describe the HTTP call for its provider, how to
    classify the provider's HTTP status codes, and which decoding schema its
    responses follow. It performs no I/O itself; IPLocator executes the
    request and drives validation and decoding.
    """

    provider: ClassVar[Provider]
    base_url: ClassVar[str]
    supports_batch: ClassVar[bool] = False
    requires_api_key: ClassVar[bool] = False
    # HTTP status -> error raised for it. Unlisted non-200 codes map to OtherProviderError.
    status_errors: ClassVar[dict[int, type[IpProviderError]]] = {}

    def __init__(self, config: ProviderConfig | None = None) -> None:
        self._config = config or ProviderConfig()

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def build_request(self) -> ProviderRequest:
        """Describe the HTTP request for the configured target IPs.

        Raises ConfigError when a required API key is missing, when several
        IPs are configured for a provider without batch support, or when the
        URL cannot be built.
        """
        if self.requires_api_key and not self._config.api_key:
            raise ConfigError(f"An API key is required for {self.provider.value}")

        target_ips = self._config.target_ips or []
        if len(target_ips) > 1:
            if not self.supports_batch:
                raise ConfigError(f"{self.provider.value} does not support batch lookups")
            request = self._batch_request(target_ips)
        else:
            request = self._single_request(target_ips[0] if target_ips else None)

        logger.debug(
            f"Built request provider={self.provider.value} method={request.method} "
            f"batch={request.batch} targets={len(target_ips)}"
        )
        return request

    def validate_response(self, status_code: int, body: bytes = b"") -> IpProviderError | None:
        """Classify the provider's HTTP status.

        Returns None for HTTP 200, otherwise the error the caller should raise.
        """
        if status_code == HTTPStatus.OK:
            return None

        message = f"{self.provider.value} returned HTTP {status_code}"
        reason = self._error_reason(body)
        if reason:
            message = f"{message}: {reason}"

        error_cls = self.status_errors.get(status_code)
        if error_cls is None:
            return OtherProviderError(status_code, message)
        return error_cls(message)

    def embedded_error(self, body: bytes | str) -> IpProviderError | None:
        """Classify an error the provider reports inside a successful (HTTP 200) body.

        Some providers answer failures with HTTP 200 and an error payload. Returns
        None when the body carries no such error, including when it is not a JSON
        object; decoding reports malformed bodies.
        """
        try:
            data = json.loads(body)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        return self._payload_error(data)

    def _payload_error(self, data: dict[str, Any]) -> IpProviderError | None:
        """Map a provider-specific error payload to a domain error; None by default."""
        return None

    def decode(self, body: bytes | str) -> IPLocation:
        """Decode a single-IP response body with this provider's schema."""
        return decoders.decode(body, self.provider)

    def decode_batch(self, body: bytes | str) -> list[IPLocation]:
        """Decode a batch response body with this provider's schema."""
        return decoders.decode_batch(body, self.provider)

    @abstractmethod
    def _single_request(self, ip: str | None) -> ProviderRequest:
        """Describe the request for one IP, or for the caller's own address when ip is None."""
        raise NotImplementedError

    def _batch_request(self, ips: list[str]) -> ProviderRequest:
        """Describe the request resolving several IPs at once."""
        raise ConfigError(f"{self.provider.value} does not support batch lookups")

    def _request(
        self,
        *path: str,
        method: str = "GET",
        params: dict[str, str | None] | None = None,
        json_body: Any = None,
        base_url: str | None = None,
    ) -> ProviderRequest:
        """Assemble a ProviderRequest, dropping unset query parameters."""
        segments = [(base_url or self.base_url).rstrip("/"), *path]
        try:
            url = str(httpx.URL("/".join(segments)))
        except httpx.InvalidURL as exc:
            raise ConfigError(f"Invalid URL for {self.provider.value}: {exc}") from exc

        return ProviderRequest(
            method=method,
            url=url,
            params={key: value for key, value in (params or {}).items() if value is not None},
            json_body=json_body,
            timeout_seconds=self._config.timeout_seconds,
            batch=json_body is not None,
        )

    @staticmethod
    def _error_reason(body: bytes | str) -> str | None:
        """Best-effort extraction of a human readable reason from an error body."""
        if not body:
            return None
        try:
            data = json.loads(body)
        except (TypeError, ValueError):
            text = body.decode(errors="replace") if isinstance(body, bytes) else body
            return text.strip()[:200] or None

        if not isinstance(data, dict):
            return None
        # ipstack and ipinfo nest the details under "error".
        error = data.get("error")
        if isinstance(error, dict):
            data = error
        for key in ("message", "reason", "info", "title"):
            if data.get(key):
                return str(data[key])
        return None
