# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Wicked SDK error codes and exception classes.

Every error raised by the SDK derives from :class:`WickedError` and carries a
machine-readable :class:`WickedErrorCode`, so callers can branch on the kind
of failure without parsing messages:

```python
try:
    user = await client.api_get("users/123")
except WickedApiError as e:
    if e.status_code == 404:
        user = None
    else:
        raise
```

Transport failures (connection refused, timeouts) are not wrapped: the
underlying ``httpx.RequestError`` propagates to the caller unchanged.
"""

from enum import Enum
from typing import Any


class WickedErrorCode(str, Enum):
    """Standard Wicked SDK error codes."""

    # Caller input
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Preconditions
    NOT_INITIALIZED = "NOT_INITIALIZED"
    ADAPTER_NOT_INITIALIZED = "ADAPTER_NOT_INITIALIZED"
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Availability
    API_UNREACHABLE = "API_UNREACHABLE"
    SHUTDOWN_PENDING = "SHUTDOWN_PENDING"
    AWAIT_GAVE_UP = "AWAIT_GAVE_UP"

    # Remote responses
    UNEXPECTED_STATUS = "UNEXPECTED_STATUS"
    PARSE_ERROR = "PARSE_ERROR"
    UNEXPECTED_RESPONSE = "UNEXPECTED_RESPONSE"


class WickedError(Exception):
    """Base exception for Wicked SDK errors.

    Usage:
        raise WickedError(
            code=WickedErrorCode.UNEXPECTED_RESPONSE,
            message="GET of user did not return expected array.",
            details={"custom_id": custom_id},
        )
    """

    def __init__(
        self,
        code: WickedErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        """Initialize Wicked error.

        Args:
            code: Error code (WickedErrorCode enum or string)
            message: Human-readable error message
            details: Additional context for debugging
        """
        self.code = code if isinstance(code, WickedErrorCode) else WickedErrorCode(code)
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging or JSON output."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Specific Error Classes
# =============================================================================


class WickedValidationError(WickedError, ValueError):
    """Raised when caller input is malformed. No network call is made."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code=WickedErrorCode.VALIDATION_ERROR,
            message=message,
            details=details,
        )


class WickedNotInitializedError(WickedError, RuntimeError):
    """Raised when an operation runs before its required initialization step."""

    def __init__(self, operation: str, required_step: str = "initialize"):
        code = (
            WickedErrorCode.NOT_INITIALIZED
            if required_step == "initialize"
            else WickedErrorCode.ADAPTER_NOT_INITIALIZED
        )
        super().__init__(
            code=code,
            message=(
                f"Before calling {operation}(), {required_step}() must have been "
                "called and has to have returned successfully."
            ),
            details={"operation": operation, "required_step": required_step},
        )
        self.operation = operation
        self.required_step = required_step


class WickedUnsupportedVersionError(WickedError):
    """Raised when the portal API is too old for the requested operation."""

    def __init__(self, operation: str, required_version: str, api_version: str | None):
        super().__init__(
            code=WickedErrorCode.UNSUPPORTED_VERSION,
            message=(
                f"{operation}() requires a portal API of version {required_version} "
                f"or higher (detected: {api_version or 'unknown'})."
            ),
            details={
                "operation": operation,
                "required_version": required_version,
                "api_version": api_version,
            },
        )


class WickedConfigurationError(WickedError):
    """Raised when the cached globals lack a required property."""

    def __init__(self, message: str, property_name: str | None = None):
        super().__init__(
            code=WickedErrorCode.CONFIGURATION_ERROR,
            message=message,
            details={"property": property_name} if property_name else None,
        )


class WickedUnavailableError(WickedError):
    """Raised, without a network call, when the portal API must not be used."""

    @classmethod
    def unreachable(cls) -> "WickedUnavailableError":
        return cls(
            code=WickedErrorCode.API_UNREACHABLE,
            message="The wicked API is currently not reachable. Try again later.",
        )

    @classmethod
    def shutdown_pending(cls) -> "WickedUnavailableError":
        return cls(
            code=WickedErrorCode.SHUTDOWN_PENDING,
            message="A shutdown due to changed configuration is pending.",
        )


class WickedAwaitError(WickedError):
    """Raised when the retry-poll primitive exhausts its attempt budget."""

    def __init__(self, url: str, max_tries: int, last_status_code: int | None = None):
        super().__init__(
            code=WickedErrorCode.AWAIT_GAVE_UP,
            message=(
                f"Too many unsuccessful retries to GET {url}. "
                f"Gave up after {max_tries} tries."
            ),
            details={
                "url": url,
                "max_tries": max_tries,
                "last_status_code": last_status_code,
            },
        )
        self.url = url
        self.max_tries = max_tries
        self.last_status_code = last_status_code


class WickedApiError(WickedError):
    """Raised when a remote service answers with an unexpected status code.

    Check ``status_code`` and ``body`` for details.
    """

    def __init__(self, message: str, status_code: int, body: str | None = None):
        super().__init__(
            code=WickedErrorCode.UNEXPECTED_STATUS,
            message=message,
            details={"status_code": status_code},
        )
        self.status_code = status_code
        self.body = body


class WickedParseError(WickedError):
    """Raised when a response body cannot be decoded as its content type promises."""

    def __init__(self, message: str, body: str | None = None, status_code: int | None = None):
        super().__init__(
            code=WickedErrorCode.PARSE_ERROR,
            message=message,
            details={"status_code": status_code} if status_code is not None else None,
        )
        self.body = body
        self.status_code = status_code
