# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""OAuth2 operations of the Kong OAuth2 service (portal API 1.0.0 and later).

Requires ``WickedClient.await_kong_oauth2()`` and a portal API reporting
version 1.0.0 or higher. ``authorize`` and ``token`` return the service's
answer whatever its status code, since OAuth2 errors are reported in the
body (``{"error": ..., "error_description": ...}``).
"""

from collections.abc import Mapping
from typing import Any

from ..errors import WickedUnsupportedVersionError
from .base import AdapterClient

REQUIRED_API_VERSION = "1.0.0"


class KongOAuth2Client(AdapterClient):
    target = "kong_oauth2"
    url_property = "kongOAuth2Url"
    default_host = "portal-kong-oauth2"
    default_port = 3006

    def _check(self, operation: str) -> None:
        session = self._session
        session.check_initialized(operation)
        if not session.is_v100_or_higher:
            raise WickedUnsupportedVersionError(operation, REQUIRED_API_VERSION, session.api_version)
        session.check_kong_oauth2_initialized(operation)

    async def authorize(self, auth_request: Mapping[str, Any]) -> Any:
        self._check("oauth2.authorize")
        return await self.action("POST", "oauth2/authorize", auth_request, raise_for_status=False)

    async def token(self, token_request: Mapping[str, Any]) -> Any:
        self._check("oauth2.token")
        return await self.action("POST", "oauth2/token", token_request, raise_for_status=False)

    async def get_access_token_info(self, access_token: str) -> Any:
        self._check("oauth2.get_access_token_info")
        return await self.action("GET", "oauth2_tokens", params={"access_token": access_token})

    async def get_refresh_token_info(self, refresh_token: str) -> Any:
        self._check("oauth2.get_refresh_token_info")
        return await self.action("GET", "oauth2_tokens", params={"refresh_token": refresh_token})

    async def revoke_access_token(self, access_token: str) -> Any:
        self._check("oauth2.revoke_access_token")
        return await self.action("DELETE", "oauth2_tokens", params={"access_token": access_token})

    async def revoke_access_tokens_by_user_id(self, authenticated_userid: str) -> Any:
        self._check("oauth2.revoke_access_tokens_by_user_id")
        return await self.action(
            "DELETE", "oauth2_tokens", params={"authenticated_userid": authenticated_userid}
        )
