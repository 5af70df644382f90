# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Portal API request dispatcher.

Every verb function of the SDK ends up in :meth:`PortalApiClient.api_action`,
which adds the headers the portal API relies on:

- ``X-Config-Hash``: hash seen at bootstrap, so the server can reject
  callers running on an outdated configuration
- ``X-Authenticated-UserId`` (``X-UserId`` before 0.12.0): acting user,
  defaulting to the machine user
- ``X-Authenticated-Scope`` (1.0.0+ only): scope, defaulting to the full
  portal API scope discovered by ``init_machine_user``
- ``Correlation-Id`` and ``User-Agent`` when known
"""

import time
from typing import Any

import httpx
import structlog

from ..errors import WickedApiError, WickedParseError, WickedUnavailableError
from ..metrics import record_request
from ..middleware.correlation_id import CORRELATION_ID_HEADER, get_correlation_id
from ..session import SessionState

logger = structlog.get_logger(__name__)

BODYLESS_METHODS = frozenset({"GET", "DELETE"})


def _nice(method: str) -> str:
    return method[:1] + method[1:].lower()


class PortalApiClient:
    """Dispatches verb/path/body calls to the portal API of a session."""

    def __init__(self, http: httpx.AsyncClient, session: SessionState, timeout: float = 2.0):
        self._http = http
        self._session = session
        self.timeout = timeout

    def build_headers(self, user_id: str | None = None, scope: str | None = None) -> dict[str, str]:
        """Build the portal API headers for one request."""
        session = self._session
        headers = {"X-Config-Hash": session.config_hash or ""}

        if not user_id and session.machine_user_id:
            user_id = session.machine_user_id
        if user_id:
            if session.is_v012_or_higher:
                headers["X-Authenticated-UserId"] = user_id
            else:
                headers["X-UserId"] = user_id

        if session.is_v100_or_higher:
            headers["X-Authenticated-Scope"] = scope or session.portal_api_scope or ""

        correlation_id = get_correlation_id() or session.correlation_id
        if correlation_id:
            headers[CORRELATION_ID_HEADER] = correlation_id
        if session.user_agent:
            headers["User-Agent"] = session.user_agent
        return headers

    async def api_action(
        self,
        method: str,
        path: str,
        body: Any = None,
        user_id: str | None = None,
        scope: str | None = None,
    ) -> Any:
        """Send one request to the portal API.

        Args:
            method: HTTP verb
            path: Path relative to the portal API base URL
            body: JSON body (ignored for GET and DELETE)
            user_id: Acting user id (defaults to the machine user)
            scope: Scope string (defaults to the discovered portal API scope)

        Returns:
            Parsed JSON, text for ``text/*`` responses, or None for empty responses

        Raises:
            WickedUnavailableError: API unreachable or shutdown pending (no request made)
            WickedApiError: Response status > 299
            WickedParseError: Response body does not match its content type
            httpx.RequestError: Transport failure
        """
        method = method.upper()
        session = self._session
        if not session.api_reachable:
            raise WickedUnavailableError.unreachable()
        if session.pending_exit:
            raise WickedUnavailableError.shutdown_pending()

        if path.startswith("/"):
            path = path[1:]
        url = f"{session.api_url}{path}"
        headers = self.build_headers(user_id, scope)

        request_kwargs: dict[str, Any] = {"headers": headers, "timeout": self.timeout}
        if method not in BODYLESS_METHODS and body is not None:
            request_kwargs["json"] = body

        logger.debug("api_action", method=method, url=url)
        started = time.perf_counter()
        try:
            response = await self._http.request(method, url, **request_kwargs)
        except httpx.RequestError:
            record_request("portal_api", method, "error", time.perf_counter() - started)
            raise
        record_request("portal_api", method, response.status_code, time.perf_counter() - started)

        if response.status_code > 299:
            raise WickedApiError(
                f"api{_nice(method)}() {path} returned non-OK status code: "
                f"{response.status_code}, check status_code and body for details",
                status_code=response.status_code,
                body=response.text,
            )
        if response.status_code == 204 or not response.content:
            return None

        content_type = response.headers.get("content-type", "")
        if content_type.startswith("text"):
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise WickedParseError(
                f"api{_nice(method)}() {path} returned non-parseable JSON: {e}",
                body=response.text,
                status_code=response.status_code,
            ) from e

    async def get(self, path: str, user_id: str | None = None, scope: str | None = None) -> Any:
        return await self.api_action("GET", path, None, user_id, scope)

    async def post(
        self, path: str, body: Any, user_id: str | None = None, scope: str | None = None
    ) -> Any:
        return await self.api_action("POST", path, body, user_id, scope)

    async def put(
        self, path: str, body: Any, user_id: str | None = None, scope: str | None = None
    ) -> Any:
        return await self.api_action("PUT", path, body, user_id, scope)

    async def patch(
        self, path: str, body: Any, user_id: str | None = None, scope: str | None = None
    ) -> Any:
        return await self.api_action("PATCH", path, body, user_id, scope)

    async def delete(self, path: str, user_id: str | None = None, scope: str | None = None) -> Any:
        return await self.api_action("DELETE", path, None, user_id, scope)
