# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Shared dispatcher for the Kong adapter services."""

import time
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
import structlog

from ..errors import WickedApiError, WickedParseError, WickedValidationError
from ..metrics import record_request
from ..session import SessionState

logger = structlog.get_logger(__name__)

BODYLESS_METHODS = frozenset({"GET", "DELETE"})


def require_fields(operation: str, info: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise if one of ``fields`` is missing or empty in ``info``."""
    for name in fields:
        if not info.get(name):
            raise WickedValidationError(
                f"{name} is mandatory",
                details={"operation": operation, "field": name},
            )


def warn_missing_auth_server(operation: str, info: Mapping[str, Any]) -> None:
    if not info.get("auth_server"):
        logger.warning(
            "auth_server is not passed in to call; it is not checked whether "
            "the API has the correct auth server configured.",
            operation=operation,
        )


class AdapterClient:
    """Base class for services reachable at a URL taken from the globals.

    Subclasses name the ``network`` property and the guessed default
    host/port of their service.
    """

    target = "adapter"
    url_property = ""
    default_host = ""
    default_port = 0

    def __init__(self, http: httpx.AsyncClient, session: SessionState, timeout: float = 5.0):
        self._http = http
        self._session = session
        self.timeout = timeout

    def base_url(self) -> str:
        return self._session.internal_url(self.url_property, self.default_host, self.default_port)

    async def action(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        raise_for_status: bool = True,
    ) -> Any:
        """Send one request to the service and decode its JSON answer.

        Args:
            method: HTTP verb
            path: Path relative to the service base URL
            body: JSON body (ignored for GET and DELETE)
            params: Query parameters
            raise_for_status: Raise on status > 299 instead of returning the body

        Returns:
            Decoded JSON body, or None for empty responses
        """
        method = method.upper()
        url = self.base_url() + path
        request_kwargs: dict[str, Any] = {"timeout": self.timeout}
        if params:
            request_kwargs["params"] = dict(params)
        if method not in BODYLESS_METHODS and body is not None:
            request_kwargs["json"] = dict(body)

        started = time.perf_counter()
        try:
            response = await self._http.request(method, url, **request_kwargs)
        except httpx.RequestError as e:
            record_request(self.target, method, "error", time.perf_counter() - started)
            logger.error("adapter_request_failed", target=self.target, method=method, url=url, error=str(e))
            raise
        record_request(self.target, method, response.status_code, time.perf_counter() - started)

        if raise_for_status and response.status_code > 299:
            logger.warning(
                "adapter_unexpected_status",
                target=self.target,
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise WickedApiError(
                f"{method} to {url} returned unexpected status code: {response.status_code}. "
                "Details in body and status_code.",
                status_code=response.status_code,
                body=response.text,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise WickedParseError(
                f"{method} to {url} returned non-parseable JSON: {e}. Possible details in body.",
                body=response.text,
                status_code=response.status_code,
            ) from e
