# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""OAuth2 operations brokered by the Kong adapter (portal API before 1.0.0).

All operations require ``WickedClient.await_kong_adapter()`` to have
succeeded. Token requests are plain mappings as expected by the adapter,
e.g. ``{"client_id": ..., "api_id": ..., "authenticated_userid": ...,
"auth_server": ..., "scope": [...]}``.
"""

from collections.abc import Mapping
from typing import Any

from .base import AdapterClient, require_fields, warn_missing_auth_server

GRANT_FIELDS = ("client_id", "api_id", "authenticated_userid")
REFRESH_FIELDS = ("refresh_token", "client_id")


class KongAdapterClient(AdapterClient):
    target = "kong_adapter"
    url_property = "kongAdapterUrl"
    default_host = "portal-kong-adapter"
    default_port = 3002

    def _check(self, operation: str) -> None:
        self._session.check_initialized(operation)
        self._session.check_kong_adapter_initialized(operation)

    async def _grant(self, operation: str, path: str, user_info: Mapping[str, Any]) -> Any:
        self._check(operation)
        require_fields(operation, user_info, GRANT_FIELDS)
        warn_missing_auth_server(operation, user_info)
        return await self.action("POST", path, user_info)

    async def authorize_implicit(self, user_info: Mapping[str, Any]) -> Any:
        """Run the implicit grant; returns ``{"redirect_uri": ...}``."""
        return await self._grant("oauth2_authorize_implicit", "oauth2/token/implicit", user_info)

    async def get_redirect_uri_with_access_token(self, user_info: Mapping[str, Any]) -> Any:
        """Alias of :meth:`authorize_implicit`."""
        return await self.authorize_implicit(user_info)

    async def get_authorization_code(self, user_info: Mapping[str, Any]) -> Any:
        """Issue an authorization code; returns ``{"redirect_uri": ...}``."""
        return await self._grant("oauth2_get_authorization_code", "oauth2/token/code", user_info)

    async def get_access_token_password_grant(self, user_info: Mapping[str, Any]) -> Any:
        """Issue an access token for the resource owner password grant."""
        return await self._grant(
            "oauth2_get_access_token_password_grant", "oauth2/token/password", user_info
        )

    async def refresh_access_token(self, token_info: Mapping[str, Any]) -> Any:
        operation = "oauth2_refresh_access_token"
        self._check(operation)
        require_fields(operation, token_info, REFRESH_FIELDS)
        warn_missing_auth_server(operation, token_info)
        return await self.action("POST", "oauth2/token/refresh", token_info)

    async def get_access_token_info(self, access_token: str) -> Any:
        self._check("oauth2_get_access_token_info")
        return await self.action("GET", "oauth2/token", params={"access_token": access_token})

    async def get_refresh_token_info(self, refresh_token: str) -> Any:
        self._check("oauth2_get_refresh_token_info")
        return await self.action("GET", "oauth2/token", params={"refresh_token": refresh_token})

    async def revoke_access_token(self, access_token: str) -> Any:
        self._check("revoke_access_token")
        return await self.action("DELETE", "oauth2/token", params={"access_token": access_token})

    async def revoke_access_tokens_by_user_id(self, authenticated_userid: str) -> Any:
        self._check("revoke_access_tokens_by_user_id")
        return await self.action(
            "DELETE", "oauth2/token", params={"authenticated_userid": authenticated_userid}
        )
