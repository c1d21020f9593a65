from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from iplocate.errors import ErrorKind, IpProviderError
from iplocate.logger import logger

# ErrorKind -> (HTTP status returned to our callers, machine-readable code).
PROVIDER_ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.config: (status.HTTP_500_INTERNAL_SERVER_ERROR, "configuration_error"),
    ErrorKind.transport: (status.HTTP_502_BAD_GATEWAY, "upstream_unreachable"),
    ErrorKind.usage_limit_reached: (status.HTTP_429_TOO_MANY_REQUESTS, "usage_limit_reached"),
    ErrorKind.not_found: (status.HTTP_404_NOT_FOUND, "ip_not_found"),
    ErrorKind.reserved_address: (status.HTTP_400_BAD_REQUEST, "reserved_ip"),
    ErrorKind.parse: (status.HTTP_502_BAD_GATEWAY, "invalid_upstream_response"),
    ErrorKind.other: (status.HTTP_502_BAD_GATEWAY, "upstream_error"),
}


def _get_provider_from_request(request: Request) -> str | None:
    """Best-effort extraction of the provider value from the incoming request.

    Currently this looks at the `provider` query parameter used by /v1/ip/lookup.
    For the batch endpoint the provider lives in the JSON body and this returns None.
    """
    return request.query_params.get("provider")


def _normalize_pydantic_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Make sure Pydantic error dicts are JSON-serializable."""
    normalized: list[dict[str, Any]] = []
    for error in errors:
        e = dict(error)
        ctx = e.get("ctx")
        if isinstance(ctx, dict):
            # Convert any non-serializable ctx values (e.g. exceptions) to strings.
            e["ctx"] = {k: str(v) for k, v in ctx.items()}
        normalized.append(e)
    return normalized


def _build_validation_error_payload(exc: ValidationError | RequestValidationError) -> dict:
    """Normalize validation errors into a `code`/`message` payload.

    Internal validation details are not exposed to clients.
    """
    code = "invalid_request"
    message = "Invalid request parameters"

    for error in _normalize_pydantic_errors(exc.errors()):
        loc = error.get("loc", ())
        # Request-level ("query", "ip"), body ("body", "ips", 0) and model-level ("ip") locations.
        if any(part in ("ip", "ips") for part in loc):
            code = "invalid_ip"
            message = "The supplied IP address is not a valid IPv4 or IPv6 address."
            break

    return {
        "code": code,
        "message": message,
    }


async def pydantic_validation_exception_handler(
    request: Request, exc: ValidationError | RequestValidationError
) -> JSONResponse:
    """Handle validation errors raised while parsing query parameters or bodies."""
    provider = _get_provider_from_request(request)
    logger.info(
        "Validation error during request handling "
        f"path={request.url.path} method={request.method} provider={provider} errors={exc.errors()}"
    )
    payload = _build_validation_error_payload(exc)
    payload["provider"] = provider
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


async def ip_provider_exception_handler(request: Request, exc: IpProviderError) -> JSONResponse:
    """Translate lookup failures into structured error responses."""
    provider = _get_provider_from_request(request)
    status_code, code = PROVIDER_ERROR_RESPONSES[exc.kind]
    log = logger.exception if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.error
    log(
        "IP lookup failed "
        f"path={request.url.path} method={request.method} provider={provider} kind={exc.kind.value} error={exc}"
    )
    content: dict[str, Any] = {
        "code": code,
        "message": str(exc),
        "provider": provider,
    }
    status_code_raw = getattr(exc, "status_code", None)
    if status_code_raw is not None:
        content["upstream_status"] = status_code_raw
    return JSONResponse(status_code=status_code, content=content)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response."""
    provider = _get_provider_from_request(request)
    logger.exception(
        "Unhandled exception while processing request: "
        f"{repr(exc)} path={request.url.path} method={request.method} provider={provider}"
    )
    content: dict[str, Any] = {
        "code": "internal_error",
        "message": "An unexpected error occurred while processing the request.",
        "provider": provider,
    }
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )
