# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Option models for the bootstrap and await operations.

Defaults come from :class:`wicked_sdk.config.Settings`, so they can be tuned
per deployment through the environment.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import get_settings

USER_AGENT_NAME_PATTERN = re.compile(r"^[a-zA-Z \-_.0-9]+$")
USER_AGENT_VERSION_PATTERN = re.compile(r"^[0-9.]+$")


class AwaitOptions(BaseModel):
    """Parameters for awaiting a remote URL.

    A negative ``max_tries`` retries until the URL answers; ``max_tries=0``
    makes exactly one attempt.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    status_code: int = Field(
        default_factory=lambda: get_settings().await_status_code,
        alias="statusCode",
        description="Status code that counts as success",
    )
    max_tries: int = Field(
        default_factory=lambda: get_settings().await_max_tries,
        alias="maxTries",
        description="Retries after the first attempt; negative = unbounded",
    )
    retry_delay: float = Field(
        default_factory=lambda: get_settings().await_retry_delay,
        alias="retryDelay",
        ge=0,
        description="Seconds to wait between attempts",
    )


class InitOptions(AwaitOptions):
    """Options for :meth:`WickedClient.initialize`.

    Accepts snake_case names or the camelCase keys of the JavaScript SDK;
    unknown keys are rejected.
    """

    user_agent_name: str | None = Field(None, alias="userAgentName")
    user_agent_version: str | None = Field(None, alias="userAgentVersion")
    do_not_poll_config_hash: bool = Field(False, alias="doNotPollConfigHash")
    exit_on_config_change: bool = Field(
        default=False,
        alias="exitOnConfigChange",
        description="Terminate the process (exit code 0) once a config change is detected",
    )

    @field_validator("user_agent_name")
    @classmethod
    def validate_user_agent_name(cls, v: str | None) -> str | None:
        if v is not None and not USER_AGENT_NAME_PATTERN.match(v):
            raise ValueError(
                "The userAgentName must only contain characters a-z, A-Z, 0-9, -, _ and space."
            )
        return v

    @field_validator("user_agent_version")
    @classmethod
    def validate_user_agent_version(cls, v: str | None) -> str | None:
        if v is not None and not USER_AGENT_VERSION_PATTERN.match(v):
            raise ValueError("The userAgentVersion must only contain characters 0-9 and .")
        return v

    @model_validator(mode="after")
    def require_user_agent_pair(self) -> "InitOptions":
        if bool(self.user_agent_name) != bool(self.user_agent_version):
            raise ValueError("You need to specify both userAgentName and userAgentVersion")
        return self

    @property
    def user_agent(self) -> str | None:
        """Return the ``User-Agent`` header value, if configured."""
        if self.user_agent_name and self.user_agent_version:
            return f"{self.user_agent_name}/{self.user_agent_version}"
        return None

    def await_options(self) -> AwaitOptions:
        """Return the await parameters used to poll the portal API."""
        return AwaitOptions(
            status_code=self.status_code,
            max_tries=self.max_tries,
            retry_delay=self.retry_delay,
        )
