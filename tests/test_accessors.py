# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for the globals-derived info accessors and subscription lookup."""

import httpx
import pytest

from wicked_sdk import InitOptions
from wicked_sdk.errors import (
    WickedConfigurationError,
    WickedError,
    WickedErrorCode,
    WickedValidationError,
)

from conftest import ADAPTER_URL, API_URL, OAUTH2_URL

NO_POLL = InitOptions(do_not_poll_config_hash=True)


def with_network(portal, **network):
    portal.add("GET", API_URL + "globals", json={"network": network})


class TestUrls:
    """External and internal URL accessors."""

    @pytest.mark.asyncio
    async def test_configured_urls(self, portal, make_client):
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)

            assert wicked.get_schema() == "https"
            assert wicked.is_development_mode() is False
            assert wicked.get_external_portal_host() == "p.example"
            assert wicked.get_external_api_host() == "a.example"
            assert wicked.get_internal_api_url() == API_URL
            assert wicked.get_internal_kong_admin_url() == "http://kong:8001/"
            assert wicked.get_internal_kong_adapter_url() == ADAPTER_URL
            assert wicked.get_internal_kong_oauth2_url() == OAUTH2_URL
            assert wicked.get_internal_url("kongAdminUrl") == "http://kong:8001/"

    @pytest.mark.asyncio
    async def test_http_schema_is_development_mode(self, portal, make_client):
        with_network(portal, schema="http", portalHost="localhost:3000/", apiHost="localhost:8000")
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)

            assert wicked.is_development_mode() is True
            assert wicked.get_external_portal_host() == "localhost:3000"
            assert wicked.get_external_portal_url() == "http://localhost:3000/"
            assert wicked.get_external_api_url() == "http://localhost:8000/"

    @pytest.mark.asyncio
    async def test_missing_schema_defaults_to_https(self, portal, make_client):
        with_network(portal, portalHost="p.example")
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            assert wicked.get_schema() == "https"
            assert wicked.is_development_mode() is True

    @pytest.mark.asyncio
    async def test_missing_hosts_raise(self, portal, make_client):
        with_network(portal, schema="https")
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            with pytest.raises(WickedConfigurationError) as exc_info:
                wicked.get_external_api_url()
            with pytest.raises(WickedConfigurationError):
                wicked.get_external_portal_host()
        assert exc_info.value.code == WickedErrorCode.CONFIGURATION_ERROR
        assert exc_info.value.details == {"property": "apiHost"}

    @pytest.mark.asyncio
    async def test_guessed_internal_urls(self, portal, make_client, monkeypatch):
        monkeypatch.setattr("wicked_sdk.network.platform.system", lambda: "Linux")
        with_network(portal, schema="https")
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            assert wicked.get_internal_kong_admin_url() == "http://kong:8001/"
            assert wicked.get_internal_mailer_url() == "http://portal-mailer:3003/"
            assert wicked.get_internal_chatbot_url() == "http://portal-chatbot:3004/"

    @pytest.mark.asyncio
    async def test_internal_url_without_default(self, portal, make_client):
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            with pytest.raises(WickedConfigurationError):
                wicked.get_internal_url("authServerUrl")

    @pytest.mark.asyncio
    async def test_portal_api_scope_empty_before_discovery(self, portal, make_client):
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            assert wicked.get_portal_api_scope() == ""
            assert wicked.get_globals().network.schema_ == "https"


class TestSubscriptionByClientId:
    """Test WickedClient.get_subscription_by_client_id()."""

    SUBSCRIPTION = {
        "application": {"id": "app1", "name": "App One"},
        "subscription": {
            "application": "app1",
            "api": "petstore",
            "plan": "basic",
            "auth": "oauth2",
            "clientId": "client-1",
        },
    }

    @pytest.mark.asyncio
    async def test_found(self, portal, make_client):
        portal.add("GET", API_URL + "subscriptions/client-1", json=self.SUBSCRIPTION)
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            info = await wicked.get_subscription_by_client_id("client-1", "petstore")

        assert info.application.name == "App One"
        assert info.subscription.client_id == "client-1"

    @pytest.mark.asyncio
    async def test_invalid_client_id(self, portal, make_client):
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            sent = len(portal.requests)
            with pytest.raises(WickedValidationError) as exc_info:
                await wicked.get_subscription_by_client_id("client_1/../x", "petstore")
        assert exc_info.value.message == "Invalid client_id format."
        assert len(portal.requests) == sent

    @pytest.mark.asyncio
    async def test_unknown_client_id(self, portal, make_client):
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            with pytest.raises(WickedError) as exc_info:
                await wicked.get_subscription_by_client_id("unknown", "petstore")
        assert exc_info.value.message == "Could not identify application with given client_id."

    @pytest.mark.asyncio
    async def test_transport_failure_is_reported_the_same(self, portal, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        portal.add("GET", API_URL + "subscriptions/client-1", handler=refuse)
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            with pytest.raises(WickedError) as exc_info:
                await wicked.get_subscription_by_client_id("client-1", "petstore")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_api_mismatch(self, portal, make_client):
        portal.add("GET", API_URL + "subscriptions/client-1", json=self.SUBSCRIPTION)
        async with make_client() as wicked:
            await wicked.initialize(NO_POLL)
            with pytest.raises(WickedError) as exc_info:
                await wicked.get_subscription_by_client_id("client-1", "other-api")
        assert exc_info.value.message == "Bad request. The client_id does not match the API."
