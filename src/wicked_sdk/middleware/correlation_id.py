# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Correlation ID middleware - propagates and generates correlation IDs.

Mount it on the host's ASGI app; every portal API call dispatched while a
request is being handled then carries the same ``Correlation-Id``.
"""

import uuid
from contextvars import ContextVar

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "Correlation-Id"

logger = structlog.get_logger(__name__)

# Context variable for correlation ID (accessible throughout request lifecycle)
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Get the current correlation ID from context ("" outside a request)."""
    return correlation_id_var.get()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to handle correlation ID propagation.

    - Picks up ``Correlation-Id`` from incoming request headers
    - Generates a new UUID4 if not present
    - Binds it to the structlog context and echoes it on the response
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER)
        if correlation_id:
            logger.debug("Picking up correlation id", correlation_id=correlation_id)
        else:
            correlation_id = str(uuid.uuid4())
            logger.debug("Creating a new correlation id", correlation_id=correlation_id)

        token = correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("correlation_id")
            correlation_id_var.reset(token)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
