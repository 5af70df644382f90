# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pytest configuration and shared fixtures.

Remote services are replaced by a :class:`StubService` mounted as an
``httpx.MockTransport``; routes are keyed by method and URL without query.
"""

import httpx
import pytest

from wicked_sdk import WickedClient
from wicked_sdk.config import Settings, clear_settings_cache

API_URL = "http://portal-api:3001/"
ADAPTER_URL = "http://portal-kong-adapter:3002/"
OAUTH2_URL = "http://portal-kong-oauth2:3006/"

GLOBALS = {
    "version": 1,
    "title": "wicked test portal",
    "network": {
        "schema": "https",
        "portalHost": "p.example",
        "apiHost": "a.example",
        "kongAdapterUrl": ADAPTER_URL,
        "kongOAuth2Url": OAUTH2_URL,
        "kongAdminUrl": "http://kong:8001",
    },
}


class StubService:
    """Canned HTTP responses for the portal API and the Kong adapters."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def add(self, method, url, status_code=200, handler=None, **response_kwargs):
        """Register a route; ``handler(request)`` overrides the canned response."""
        if handler is None:

            def handler(request):
                return httpx.Response(status_code, **response_kwargs)

        self.routes[(method, url)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?")[0]
        handler = self.routes.get((request.method, url))
        if handler is None:
            return httpx.Response(404, text="Not Found")
        return handler(request)

    def requests_to(self, method, url) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and str(r.url).split("?")[0] == url
        ]

    def last(self) -> httpx.Request:
        return self.requests[-1]


def sequence(*responses):
    """Handler returning the given responses in order, repeating the last one.

    Entries are ``httpx.Response`` factories or exceptions to raise.
    """
    remaining = list(responses)

    def handler(request):
        item = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(item, Exception):
            raise item
        return item()

    return handler


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Reset settings cache and keep retry defaults fast for every test."""
    monkeypatch.delenv("PORTAL_API_URL", raising=False)
    monkeypatch.setenv("WICKED_AWAIT_RETRY_DELAY", "0")
    monkeypatch.setenv("WICKED_AWAIT_MAX_TRIES", "3")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        portal_api_url=API_URL,
        config_hash_poll_interval=0.01,
        exit_grace_seconds=0.01,
    )


@pytest.fixture
def stub() -> StubService:
    return StubService()


@pytest.fixture
def portal(stub) -> StubService:
    """Stub portal API answering the bootstrap calls (version 1.0.0)."""
    stub.add("GET", API_URL + "ping", json={"version": "1.0.0"})
    stub.add("GET", API_URL + "confighash", text="abc123")
    stub.add("GET", API_URL + "globals", json=GLOBALS)
    return stub


@pytest.fixture
def make_client(settings, stub):
    """Factory for clients wired to the stub transport."""

    def factory(**overrides) -> WickedClient:
        client_settings = settings.model_copy(update=overrides) if overrides else settings
        return WickedClient(settings=client_settings, transport=stub.transport)

    return factory
