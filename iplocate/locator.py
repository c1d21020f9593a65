import httpx

from iplocate.clients.base import BaseIPLookupClient
from iplocate.errors import IpProviderError, TransportError
from iplocate.logger import get_logger
from iplocate.models.common import IPLocation
from iplocate.models.request_models import ProviderRequest

logger = get_logger("locator")


class IPLocator:
    """Run a single lookup against a configured provider client.

    The steps are build -> execute -> validate (status, then error bodies) -> decode,
    and the first failing step raises. There are no retries; a lookup is exactly
    one HTTP exchange.

    Cancelling the awaiting task aborts the exchange while it waits on the
    transport, before the response is validated or decoded.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._http_client = http_client

    async def lookup(self, client: BaseIPLookupClient) -> IPLocation | list[IPLocation]:
        """Resolve the client's configured target(s).

        Returns a list of locations for batch requests, a single location otherwise.
        """
        provider = client.provider.value
        request = client.build_request()
        logger.info(f"Performing IP lookup provider={provider} method={request.method} batch={request.batch}")

        try:
            response = await self._send(request)
        except httpx.TimeoutException as exc:
            logger.error(f"IP provider timed out provider={provider} timeout={request.timeout_seconds}")
            raise TransportError(f"Request to IP provider timed out: {repr(exc)}") from exc
        except httpx.RequestError as exc:
            logger.error(f"Request to IP provider failed provider={provider} error={exc!r}")
            raise TransportError(f"Request to IP provider failed: {repr(exc)}") from exc

        error = client.validate_response(response.status_code, response.content)
        if error is not None:
            logger.warning(
                f"IP provider rejected lookup provider={provider} "
                f"status_code={response.status_code} kind={error.kind.value}"
            )
            raise error

        error = client.embedded_error(response.content)
        if error is not None:
            logger.warning(f"IP provider reported an error in its body provider={provider} kind={error.kind.value}")
            raise error

        try:
            if request.batch:
                return client.decode_batch(response.content)
            return client.decode(response.content)
        except IpProviderError as exc:
            logger.error(f"Failed to decode IP provider response provider={provider} error={exc}")
            raise

    async def _send(self, request: ProviderRequest) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.request(
                request.method,
                request.url,
                params=request.params,
                json=request.json_body,
                timeout=request.timeout_seconds,
            )

        async with httpx.AsyncClient(timeout=request.timeout_seconds) as http_client:
            return await http_client.request(
                request.method,
                request.url,
                params=request.params,
                json=request.json_body,
            )


def get_ip_locator() -> IPLocator:
    """Dependency to provide an IPLocator instance."""
    return IPLocator()


async def lookup(client: BaseIPLookupClient) -> IPLocation | list[IPLocation]:
    """Shortcut for IPLocator().lookup(client)."""
    return await IPLocator().lookup(client)
