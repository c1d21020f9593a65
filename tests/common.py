import asyncio
import json
from http import HTTPStatus
from typing import Any

import httpx


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload if payload is not None else {})
        self.content = self.text.encode()


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient.

    Every call is recorded in `calls` so tests can inspect the outgoing request.
    """

    def __init__(self, response: MockResponse) -> None:
        self._response = response
        self.calls: list[dict[str, Any]] = []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self._response


class FailingAsyncClient:
    """Async client that raises an httpx error on enter to simulate network failure.

    The target URL is provided at construction time, so tests for different providers
    can reuse this implementation with different base URLs.
    """

    def __init__(self, url: str, *args: Any, error_cls: type[httpx.RequestError] = httpx.RequestError, **kwargs: Any) -> None:
        self._url = url
        self._error_cls = error_cls

    async def __aenter__(self) -> "FailingAsyncClient":
        request = httpx.Request("GET", self._url)
        raise self._error_cls("Network failure", request=request)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        return MockResponse(status_code=HTTPStatus.OK, payload={})


class HangingAsyncClient:
    """Async client whose request never completes until the awaiting task is cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()

    async def __aenter__(self) -> "HangingAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        self.started.set()
        await asyncio.Event().wait()
        raise AssertionError("unreachable")
