"""Shared fixtures for relay tests: fake clock, mock relay server."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from heartlink.relay.client import RelayClient

TEST_BASE_URL = "https://relay.test"
TEST_DEVICE_ID = "watch-01"


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RelayServer:
    """Scriptable stand-in for the relay endpoint behind httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.response: dict[str, Any] | Callable[[httpx.Request], Any] = {
            "success": True,
            "message": "ok",
        }

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self.response):
            result = self.response(request)
            if hasattr(result, "__await__"):
                result = await result
            return result
        return httpx.Response(200, json=self.response)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def relay_server() -> RelayServer:
    return RelayServer()


@pytest_asyncio.fixture
async def http_client(relay_server: RelayServer):
    async with httpx.AsyncClient(transport=httpx.MockTransport(relay_server.handle)) as client:
        yield client


@pytest.fixture
def relay_client(http_client: httpx.AsyncClient) -> RelayClient:
    return RelayClient(TEST_BASE_URL, TEST_DEVICE_ID, http_client)
