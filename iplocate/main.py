from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from iplocate.errors import IpProviderError
from iplocate.exception_handlers import (
    ip_provider_exception_handler,
    pydantic_validation_exception_handler,
    unhandled_exception_handler,
)
from iplocate.factory import IpLookupProviderFactory, get_ip_lookup_provider_factory
from iplocate.locator import IPLocator, get_ip_locator
from iplocate.logger import logger
from iplocate.models.common import IPLocation
from iplocate.models.request_models import IPBatchLookupRequest, IPLookupRequest
from iplocate.models.response_models import HealthResponse, IPLookupResponse
from iplocate.settings import Settings, get_settings

app = FastAPI(
    title="iplocate",
    version="0.1.0",
    description="Resolve the location of IP addresses through interchangeable geolocation providers.",
)
logger.info("Started iplocate service")

app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(RequestValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(IpProviderError, ip_provider_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get(
    "/v1/ip/lookup",
    response_model=IPLookupResponse,
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for an IP address.",
)
async def ip_lookup(
    request: Request,
    query: Annotated[IPLookupRequest, Depends()],
    provider_factory: Annotated[IpLookupProviderFactory, Depends(get_ip_lookup_provider_factory)],
    locator: Annotated[IPLocator, Depends(get_ip_locator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> IPLookupResponse:
    """Look up geolocation information for either a specific IP or this service's own address.

    - If `query.ip` is provided, that IP is used.
    - Otherwise the provider resolves the address the request reaches it from.
    - `query.provider` selects the upstream provider; when omitted the
      configured default provider is used.

    Provider failures propagate to `ip_provider_exception_handler`.
    """
    provider = query.provider or settings.default_provider
    target_ips = [query.ip] if query.ip else None
    client = provider_factory(provider, settings.provider_config(provider, target_ips))

    logger.info(
        "Performing IP lookup "
        f"path={request.url.path} method={request.method} ip={query.ip} provider={provider.value}"
    )
    location = await locator.lookup(client)
    if not isinstance(location, IPLocation):
        raise TypeError(f"Expected a single location from {provider.value}, got {type(location).__name__}")
    return IPLookupResponse.from_location(provider, location)


@app.post(
    "/v1/ip/batch",
    response_model=list[IPLookupResponse],
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for several IP addresses in one provider call.",
)
async def ip_batch_lookup(
    request: Request,
    body: IPBatchLookupRequest,
    provider_factory: Annotated[IpLookupProviderFactory, Depends(get_ip_lookup_provider_factory)],
    locator: Annotated[IPLocator, Depends(get_ip_locator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> list[IPLookupResponse]:
    """Resolve several IPs at once; the provider must support batch lookups."""
    provider = body.provider
    client = provider_factory(provider, settings.provider_config(provider, body.ips))

    logger.info(
        "Performing batch IP lookup "
        f"path={request.url.path} method={request.method} count={len(body.ips)} provider={provider.value}"
    )
    result = await locator.lookup(client)
    locations = result if isinstance(result, list) else [result]
    return [IPLookupResponse.from_location(provider, location) for location in locations]
