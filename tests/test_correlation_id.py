# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for CorrelationIdMiddleware."""

import uuid

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from wicked_sdk.middleware import CORRELATION_ID_HEADER, CorrelationIdMiddleware, get_correlation_id


async def echo(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "context": get_correlation_id(),
            "state": request.state.correlation_id,
        }
    )


def make_app() -> Starlette:
    app = Starlette(routes=[Route("/echo", echo)])
    app.add_middleware(CorrelationIdMiddleware)
    return app


class TestCorrelationIdMiddleware:
    """Test correlation id propagation."""

    def test_propagates_incoming_id(self):
        client = TestClient(make_app())
        response = client.get("/echo", headers={CORRELATION_ID_HEADER: "corr-42"})

        assert response.status_code == 200
        assert response.headers[CORRELATION_ID_HEADER] == "corr-42"
        assert response.json() == {"context": "corr-42", "state": "corr-42"}

    def test_generates_id_when_absent(self):
        client = TestClient(make_app())
        response = client.get("/echo")

        correlation_id = response.headers[CORRELATION_ID_HEADER]
        assert uuid.UUID(correlation_id).version == 4
        assert response.json()["context"] == correlation_id

    def test_each_request_gets_its_own_id(self):
        client = TestClient(make_app())
        first = client.get("/echo").headers[CORRELATION_ID_HEADER]
        second = client.get("/echo").headers[CORRELATION_ID_HEADER]
        assert first != second

    def test_empty_outside_request(self):
        assert get_correlation_id() == ""
