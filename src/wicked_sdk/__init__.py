# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""wicked-sdk: async client for the wicked API portal.

Long-lived service processes usually hold exactly one client; the module
level helpers below manage that instance::

    await init_wicked_client({"user_agent_name": "my-service", "user_agent_version": "1.0.0"})
    wicked = get_wicked_client()
    ...
    await shutdown_wicked_client()
"""

from typing import Any

import structlog

from .client import WickedClient
from .errors import (
    WickedApiError,
    WickedAwaitError,
    WickedConfigurationError,
    WickedError,
    WickedErrorCode,
    WickedNotInitializedError,
    WickedParseError,
    WickedUnavailableError,
    WickedUnsupportedVersionError,
    WickedValidationError,
)
from .logging_config import configure_logging
from .middleware import CorrelationIdMiddleware
from .models import AwaitOptions, InitOptions, WickedGlobals

__version__ = "0.1.0"

logger = structlog.get_logger(__name__)

# =============================================================================
# SINGLETON
# =============================================================================

_client: WickedClient | None = None


async def init_wicked_client(
    options: InitOptions | dict[str, Any] | None = None, **client_kwargs: Any
) -> WickedClient:
    """Create and initialize the WickedClient singleton.

    A previously initialized singleton is closed first.
    """
    global _client
    client = WickedClient(**client_kwargs)
    try:
        await client.initialize(options)
    except BaseException:
        await client.aclose()
        raise
    if _client is not None:
        await _client.aclose()
    _client = client
    return _client


def get_wicked_client() -> WickedClient:
    """Get the WickedClient singleton.

    Raises:
        RuntimeError: If client not initialized
    """
    if _client is None:
        raise RuntimeError("WickedClient not initialized. Call init_wicked_client() first.")
    return _client


async def shutdown_wicked_client() -> None:
    """Stop the config watcher and close the singleton's HTTP client."""
    global _client
    if _client:
        await _client.aclose()
        logger.info("WickedClient shutdown")
    _client = None


__all__ = [
    "__version__",
    "WickedClient",
    "init_wicked_client",
    "get_wicked_client",
    "shutdown_wicked_client",
    "configure_logging",
    "CorrelationIdMiddleware",
    # Options / documents
    "AwaitOptions",
    "InitOptions",
    "WickedGlobals",
    # Errors
    "WickedError",
    "WickedErrorCode",
    "WickedApiError",
    "WickedAwaitError",
    "WickedConfigurationError",
    "WickedNotInitializedError",
    "WickedParseError",
    "WickedUnavailableError",
    "WickedUnsupportedVersionError",
    "WickedValidationError",
]
