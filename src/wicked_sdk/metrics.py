# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Prometheus metrics for outbound SDK traffic.

Metrics are registered in the default registry, so a host process that
already exposes ``/metrics`` picks them up without extra wiring.
"""

from prometheus_client import Counter, Histogram

from .config import get_settings

settings = get_settings()
prefix = settings.metrics_prefix


# =============================================================================
# Metrics Definitions
# =============================================================================

# Outbound requests (portal API, Kong adapter, Kong OAuth2)
OUTBOUND_REQUESTS_TOTAL = Counter(
    f"{prefix}_outbound_requests_total",
    "Total requests sent to remote services",
    ["target", "method", "status_code"],
)

OUTBOUND_REQUEST_DURATION_SECONDS = Histogram(
    f"{prefix}_outbound_request_duration_seconds",
    "Outbound request duration in seconds",
    ["target", "method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Retry-poll
AWAIT_ATTEMPTS_TOTAL = Counter(
    f"{prefix}_await_attempts_total",
    "Total attempts made while awaiting a remote URL",
    ["outcome"],
)

# Config hash watchdog
CONFIG_HASH_CHECKS_TOTAL = Counter(
    f"{prefix}_config_hash_checks_total",
    "Total config hash checks by outcome",
    ["outcome"],
)


def record_request(target: str, method: str, status_code: int | str, duration: float) -> None:
    """Record a completed outbound request."""
    if not settings.metrics_enabled:
        return
    OUTBOUND_REQUESTS_TOTAL.labels(
        target=target, method=method, status_code=str(status_code)
    ).inc()
    OUTBOUND_REQUEST_DURATION_SECONDS.labels(target=target, method=method).observe(duration)


def record_await_attempt(outcome: str) -> None:
    """Record a retry-poll attempt (success, status_mismatch, transport_error)."""
    if settings.metrics_enabled:
        AWAIT_ATTEMPTS_TOTAL.labels(outcome=outcome).inc()


def record_config_hash_check(outcome: str) -> None:
    """Record a watchdog tick (unchanged, changed, unreachable)."""
    if settings.metrics_enabled:
        CONFIG_HASH_CHECKS_TOTAL.labels(outcome=outcome).inc()
