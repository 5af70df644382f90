# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for settings and option models."""

import pytest
from pydantic import ValidationError

from wicked_sdk.config import Settings, clear_settings_cache, get_settings
from wicked_sdk.models import AwaitOptions, InitOptions


class TestSettings:
    """Test Settings loading."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("WICKED_AWAIT_RETRY_DELAY")
        monkeypatch.delenv("WICKED_AWAIT_MAX_TRIES")
        settings = Settings()
        assert settings.portal_api_url == ""
        assert settings.portal_api_timeout == 2.0
        assert settings.kong_timeout == 5.0
        assert settings.await_max_tries == 100
        assert settings.await_retry_delay == 1.0
        assert settings.config_hash_poll_interval == 10.0
        assert settings.exit_grace_seconds == 2.0

    def test_portal_api_url_from_env(self, monkeypatch):
        monkeypatch.setenv("PORTAL_API_URL", " http://portal-api:3001/ ")
        assert Settings().portal_api_url == "http://portal-api:3001/"

    def test_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("WICKED_KONG_TIMEOUT", "7.5")
        assert Settings().kong_timeout == 7.5

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="CHATTY")

    def test_get_settings_is_cached(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first
        monkeypatch.setenv("WICKED_AWAIT_MAX_TRIES", "9")
        clear_settings_cache()
        assert get_settings().await_max_tries == 9


class TestAwaitOptions:
    """Test AwaitOptions."""

    def test_defaults_from_settings(self):
        options = AwaitOptions()
        assert options.status_code == 200
        assert options.max_tries == 3
        assert options.retry_delay == 0

    def test_negative_delay_rejected(self):
        with pytest.raises(ValidationError):
            AwaitOptions(retry_delay=-1)

    def test_camel_case_aliases(self):
        options = AwaitOptions.model_validate({"statusCode": 204, "maxTries": 2, "retryDelay": 0.5})
        assert (options.status_code, options.max_tries, options.retry_delay) == (204, 2, 0.5)
        assert AwaitOptions(max_tries=2).model_fields_set == {"max_tries"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            AwaitOptions.model_validate({"max_retries": 2})

    def test_frozen(self):
        options = AwaitOptions()
        with pytest.raises(ValidationError):
            options.max_tries = 5


class TestInitOptions:
    """Test InitOptions validation."""

    def test_user_agent(self):
        options = InitOptions(user_agent_name="wicked.portal-mailer", user_agent_version="1.0.0")
        assert options.user_agent == "wicked.portal-mailer/1.0.0"

    def test_no_user_agent(self):
        options = InitOptions()
        assert options.user_agent is None
        assert options.do_not_poll_config_hash is False
        assert options.exit_on_config_change is False

    @pytest.mark.parametrize(
        "name,version",
        [
            ("my-service", None),
            (None, "1.0.0"),
            ("my/service", "1.0.0"),
            ("my-service", "1.0.0-beta"),
        ],
    )
    def test_invalid_user_agent(self, name, version):
        with pytest.raises(ValidationError):
            InitOptions(user_agent_name=name, user_agent_version=version)

    def test_await_options(self):
        options = InitOptions(max_tries=7, retry_delay=0.5, status_code=204)
        await_options = options.await_options()
        assert isinstance(await_options, AwaitOptions)
        assert not isinstance(await_options, InitOptions)
        assert (await_options.status_code, await_options.max_tries, await_options.retry_delay) == (
            204,
            7,
            0.5,
        )

    def test_camel_case_keys(self):
        options = InitOptions.model_validate(
            {
                "userAgentName": "my-service",
                "userAgentVersion": "1.0.0",
                "doNotPollConfigHash": True,
                "exitOnConfigChange": True,
            }
        )
        assert options.user_agent == "my-service/1.0.0"
        assert options.do_not_poll_config_hash is True
        assert options.exit_on_config_change is True

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            InitOptions.model_validate({"doNotPollConfighash": True})
