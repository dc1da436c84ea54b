"""Shared fixtures: configs and a routed httpx.MockTransport standing in for the X API."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from x_plugin import XConfig

Handler = Callable[[httpx.Request], httpx.Response]


class FakeXAPI:
    """
    Route table for httpx.MockTransport.

    Routes are keyed by ``(METHOD, host + path)``; unrouted requests get a
    404. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        json_data: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=json_data, headers=headers)

        self.routes[(method.upper(), url)] = handler

    def add_handler(self, method: str, url: str, handler: Handler) -> None:
        self.routes[(method.upper(), url)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, f"{request.url.scheme}://{request.url.host}{request.url.path}")
        handler = self.routes.get(key)
        if handler is None:
            return httpx.Response(404, json={"title": "Not Found Error"})
        return handler(request)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method.upper()
            and f"{r.url.scheme}://{r.url.host}{r.url.path}" == url
        ]

    @staticmethod
    def json_body(request: httpx.Request) -> Any:
        return json.loads(request.content)


V2 = "https://api.twitter.com/2"
V1 = "https://api.twitter.com/1.1"
UPLOAD = "https://upload.twitter.com/1.1"
TOKEN_URL = "https://api.twitter.com/2/oauth2/token"


@pytest.fixture
def fake_api() -> FakeXAPI:
    return FakeXAPI()


@pytest.fixture
def http_client(fake_api):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_api))


@pytest.fixture
def config() -> XConfig:
    """Full OAuth 1.0a user-context credentials, no OAuth 2.0."""
    return XConfig(
        api_key="test-api-key",
        api_secret="test-api-secret",
        access_token="test-access-token",
        access_secret="test-access-secret",
    )


@pytest.fixture
def read_only_config() -> XConfig:
    """Consumer key/secret only."""
    return XConfig(api_key="test-api-key", api_secret="test-api-secret")


@pytest.fixture
def oauth2_config() -> XConfig:
    return XConfig(
        api_key="test-api-key",
        api_secret="test-api-secret",
        access_token="test-access-token",
        access_secret="test-access-secret",
        client_id="test-client-id",
        client_secret="test-client-secret",
    )


def user_payload(user_id: str = "u1", username: str = "alice", name: str = "Alice") -> dict:
    return {
        "data": {
            "id": user_id,
            "name": name,
            "username": username,
            "description": "bio",
            "profile_image_url": "https://pbs.twimg.com/alice.jpg",
            "verified": True,
            "created_at": "2020-01-02T03:04:05.000Z",
            "location": "Earth",
            "url": "https://example.com",
            "public_metrics": {
                "followers_count": 10,
                "following_count": 20,
                "tweet_count": 30,
            },
        }
    }
