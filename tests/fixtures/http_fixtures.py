"""Fake HTTP backend for exercising NoiseApiClient without a network."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
import pytest_asyncio

from noise.services.api_client import NoiseApiClient
from noise.storage import InMemoryKeyValueStore, TokenStore

BASE_URL = "https://api.noise.test/api/v1/"
API_PREFIX = "/api/v1/"


@dataclass
class FakeRoute:
    status_code: int = 200
    json: Any = None
    content: bytes | None = None
    error: Callable[[httpx.Request], Exception] | None = None


@dataclass
class FakeBackend:
    """Routes by path below /api/v1/ and records every request it receives."""

    routes: dict[str, FakeRoute] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def respond(self, path: str, status_code: int = 200, json: Any = None, content: bytes | None = None) -> None:
        self.routes[path] = FakeRoute(status_code=status_code, json=json, content=content)

    def fail(self, path: str, error: Callable[[httpx.Request], Exception]) -> None:
        self.routes[path] = FakeRoute(error=error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(API_PREFIX)
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"success": False, "message": f"No route for {path}"})
        if route.error is not None:
            raise route.error(request)
        if route.content is not None:
            return httpx.Response(route.status_code, content=route.content)
        return httpx.Response(route.status_code, json=route.json)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"{API_PREFIX}{path}"]

    def last_json(self, path: str) -> Any:
        return json.loads(self.requests_to(path)[-1].content)


def user_json(**overrides: Any) -> dict[str, Any]:
    data = {
        "id": "u_1",
        "email": "demo@noise.app",
        "username": "demo",
        "display_name": "Demo",
        "avatar_url": None,
        "status": "active",
        "followers_count": 4,
        "following_count": 2,
        "bio": None,
        "website_url": None,
        "is_private": False,
    }
    data.update(overrides)
    return data


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def key_value_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def token_store(key_value_store: InMemoryKeyValueStore) -> TokenStore:
    return TokenStore(key_value_store)


@pytest_asyncio.fixture
async def http_client(fake_backend: FakeBackend):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_backend.handler)) as client:
        yield client


@pytest.fixture
def api_client(token_store: TokenStore, http_client: httpx.AsyncClient) -> NoiseApiClient:
    """Client with no session token."""
    return NoiseApiClient(BASE_URL, token_store, http_client=http_client)


@pytest.fixture
def authed_client(token_store: TokenStore, http_client: httpx.AsyncClient) -> NoiseApiClient:
    """Client restored from a persisted session token `tok_saved`."""
    token_store.save("tok_saved")
    return NoiseApiClient(BASE_URL, token_store, http_client=http_client)
