# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Retry-poll primitive: wait until a URL answers with an expected status.

Used to wait for the portal API during bootstrap and for the Kong adapter and
Kong OAuth2 services before their first use. Every attempt is a plain GET
with its own short timeout; the overall budget is ``max_tries`` retries after
the first attempt, spaced ``retry_delay`` seconds apart.
"""

import asyncio

import httpx
import structlog

from ..config import get_settings
from ..errors import WickedAwaitError
from ..metrics import record_await_attempt
from ..models import AwaitOptions

logger = structlog.get_logger(__name__)


async def await_url(
    http: httpx.AsyncClient,
    url: str,
    options: AwaitOptions | None = None,
    attempt_timeout: float | None = None,
) -> str:
    """GET ``url`` until it returns ``options.status_code``.

    Args:
        http: Client used for the attempts
        url: URL to poll
        options: Expected status code and retry budget
        attempt_timeout: Per-attempt timeout in seconds (defaults to settings)

    Returns:
        Body text of the first successful response

    Raises:
        WickedAwaitError: The budget was exhausted on status mismatches
        httpx.RequestError: The final attempt failed at transport level
    """
    options = options or AwaitOptions()
    if attempt_timeout is None:
        attempt_timeout = get_settings().await_attempt_timeout

    try_counter = 0
    while True:
        logger.debug("await_url_attempt", url=url, attempt=try_counter)
        transport_error: httpx.RequestError | None = None
        status_code: int | None = None
        try:
            response = await http.get(url, timeout=attempt_timeout)
        except httpx.RequestError as e:
            transport_error = e
            record_await_attempt("transport_error")
        else:
            if response.status_code == options.status_code:
                record_await_attempt("success")
                if try_counter > 0:
                    logger.info("await_url_succeeded", url=url, attempts=try_counter + 1)
                return response.text
            status_code = response.status_code
            record_await_attempt("status_mismatch")

        if options.max_tries < 0 or try_counter < options.max_tries:
            try_counter += 1
            await asyncio.sleep(options.retry_delay)
            continue

        logger.warning(
            "await_url_gave_up",
            url=url,
            max_tries=options.max_tries,
            last_status_code=status_code,
            error=str(transport_error) if transport_error else None,
        )
        if transport_error is not None:
            raise transport_error
        raise WickedAwaitError(url, options.max_tries, status_code)
