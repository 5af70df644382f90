# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for URL helpers and version capability detection."""

import socket

import pytest

from wicked_sdk import network
from wicked_sdk.config import Settings
from wicked_sdk.errors import WickedNotInitializedError
from wicked_sdk.session import SessionState, VersionCapabilities, parse_version


class TestSlashes:

    def test_check_slash(self):
        assert network.check_slash("http://a") == "http://a/"
        assert network.check_slash("http://a/") == "http://a/"

    def test_check_no_slash(self):
        assert network.check_no_slash("p.example/") == "p.example"
        assert network.check_no_slash("p.example") == "p.example"


class TestGuessing:

    def test_linux_uses_service_host(self, monkeypatch):
        monkeypatch.setattr(network.platform, "system", lambda: "Linux")
        assert network.guess_service_url("portal-api", 3001) == "http://portal-api:3001/"

    def test_other_platforms_use_local_ip(self, monkeypatch):
        monkeypatch.setattr(network.platform, "system", lambda: "Darwin")
        monkeypatch.setattr(network, "get_default_local_ip", lambda: "192.168.1.20")
        assert network.guess_service_url("portal-api", 3001) == "http://192.168.1.20:3001/"

    def test_local_ips_skip_loopback(self, monkeypatch):
        infos = [
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.5", 0)),
            (socket.AF_INET, socket.SOCK_DGRAM, 17, "", ("10.0.0.5", 0)),
        ]
        monkeypatch.setattr(network.socket, "getaddrinfo", lambda *args: infos)
        assert network.get_local_ips() == ["10.0.0.5"]

    def test_default_local_ip_falls_back_to_localhost(self, monkeypatch):
        monkeypatch.setattr(network, "get_local_ips", lambda: [])
        assert network.get_default_local_ip() == "localhost"

    def test_resolve_api_url_adds_slash(self):
        settings = Settings(portal_api_url="http://portal-api:3001")
        assert network.resolve_api_url(settings) == "http://portal-api:3001/"

    def test_resolve_api_url_guesses(self, monkeypatch):
        monkeypatch.setattr(network.platform, "system", lambda: "Linux")
        assert network.resolve_api_url(Settings()) == "http://portal-api:3001/"


class TestVersions:

    @pytest.mark.parametrize(
        "version,expected",
        [
            ("1.0.0", (1, 0, 0)),
            ("0.12.7", (0, 12, 7)),
            ("1.0.0-beta.3", (1, 0, 0)),
            ("v2.1", (2, 1, 0)),
            ("dev", None),
        ],
    )
    def test_parse_version(self, version, expected):
        assert parse_version(version) == expected

    def test_capabilities_without_version(self):
        caps = VersionCapabilities.from_ping({"message": "OK"})
        assert caps.api_version is None
        assert caps.is_v012_or_higher is False
        assert caps.is_v100_or_higher is False

    def test_capabilities_of_unparseable_version(self):
        caps = VersionCapabilities.from_ping({"version": "dev"})
        assert caps.is_v012_or_higher is True
        assert caps.is_v100_or_higher is False

    def test_capabilities_of_v1(self):
        caps = VersionCapabilities.from_ping({"version": "1.2.0"})
        assert caps.api_version == "1.2.0"
        assert caps.is_v100_or_higher is True

    def test_non_object_ping(self):
        assert VersionCapabilities.from_ping(["1.0.0"]) == VersionCapabilities()


class TestSessionState:

    def test_checks_before_initialize(self):
        session = SessionState()
        with pytest.raises(WickedNotInitializedError):
            session.check_initialized("get_globals")
        with pytest.raises(WickedNotInitializedError):
            session.internal_url("kongAdminUrl", "kong", 8001)

    def test_network_property(self):
        session = SessionState(globals_document={"network": {"schema": "http"}})
        assert session.network_property("schema") == "http"
        assert session.network_property("portalHost") is None
        assert SessionState().network_property("schema") is None
