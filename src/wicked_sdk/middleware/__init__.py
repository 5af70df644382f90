# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""ASGI middleware for hosts of the SDK."""

from .correlation_id import (
    CORRELATION_ID_HEADER,
    CorrelationIdMiddleware,
    correlation_id_var,
    get_correlation_id,
)

__all__ = [
    "CORRELATION_ID_HEADER",
    "CorrelationIdMiddleware",
    "correlation_id_var",
    "get_correlation_id",
]
