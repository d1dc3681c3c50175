"""Minimal stand-ins for aiohttp sessions used by the feed tests."""

from __future__ import annotations

from typing import Any

import aiohttp


class FakeContent:
    def __init__(self, body: bytes, fail_after: int | None = None):
        self._body = body
        self._fail_after = fail_after

    async def iter_chunked(self, n: int):
        for i in range(0, len(self._body), n):
            if self._fail_after is not None and i >= self._fail_after:
                raise aiohttp.ClientPayloadError("connection reset")
            yield self._body[i : i + n]


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        body: bytes = b"",
        json_data: Any = None,
        fail_after: int | None = None,
    ):
        self.status = status
        self._body = body
        self._json = json_data
        self.content = FakeContent(body, fail_after)

    async def read(self) -> bytes:
        return self._body

    async def json(self) -> Any:
        return self._json

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


class FakeSession:
    """Serves canned responses keyed by (method, url) and records requests."""

    def __init__(self, responses: dict[tuple[str, str], FakeResponse | Exception]):
        self.responses = responses
        self.requests: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append((method, url, kwargs))
        response = self.responses.get((method, url))
        if response is None:
            return FakeResponse(status=404)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)
