# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Session state of a :class:`~wicked_sdk.client.WickedClient`.

One instance per client. It is populated once by the bootstrap, after which
only the config watcher (``api_reachable``, ``pending_exit``), the machine
user step (``machine_user_id``, ``portal_api_scope``) and the adapter await
steps (readiness flags) write to it.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from .errors import WickedConfigurationError, WickedNotInitializedError
from .models import WickedGlobals
from .network import check_slash, guess_service_url

API_SCOPE_VERSION = (1, 0, 0)

_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(version: str) -> tuple[int, int, int] | None:
    """Parse the numeric ``major.minor.patch`` prefix of a version string.

    Pre-release and build suffixes are ignored: ``"1.0.0-beta.3"`` parses as
    ``(1, 0, 0)``. Returns ``None`` if there is no numeric prefix.
    """
    match = _VERSION_PATTERN.match(version)
    if not match:
        return None
    return tuple(int(part or 0) for part in match.groups())  # type: ignore[return-value]


@dataclass
class VersionCapabilities:
    """Capability flags derived from the version reported by ``GET /ping``."""

    api_version: str | None = None
    is_v012_or_higher: bool = False
    is_v100_or_higher: bool = False

    @classmethod
    def from_ping(cls, ping: Any) -> "VersionCapabilities":
        if not isinstance(ping, dict) or not ping.get("version"):
            return cls()
        api_version = str(ping["version"])
        parsed = parse_version(api_version)
        return cls(
            api_version=api_version,
            # Any reported version implies 0.12.0+
            is_v012_or_higher=True,
            is_v100_or_higher=parsed is not None and parsed >= API_SCOPE_VERSION,
        )


@dataclass
class SessionState:
    """Mutable state shared by the client, its dispatchers and the watcher."""

    initialized: bool = False
    api_url: str | None = None
    globals_document: dict[str, Any] | None = None
    globals: WickedGlobals | None = None
    config_hash: str | None = None
    user_agent: str | None = None
    correlation_id: str | None = None
    machine_user_id: str | None = None
    portal_api_scope: str | None = None
    api_reachable: bool = False
    pending_exit: bool = False
    capabilities: VersionCapabilities = field(default_factory=VersionCapabilities)
    kong_adapter_initialized: bool = False
    kong_oauth2_initialized: bool = False

    @property
    def api_version(self) -> str | None:
        return self.capabilities.api_version

    @property
    def is_v012_or_higher(self) -> bool:
        return self.capabilities.is_v012_or_higher

    @property
    def is_v100_or_higher(self) -> bool:
        return self.capabilities.is_v100_or_higher

    def check_initialized(self, operation: str) -> None:
        if not self.initialized:
            raise WickedNotInitializedError(operation)

    def check_kong_adapter_initialized(self, operation: str) -> None:
        if not self.kong_adapter_initialized:
            raise WickedNotInitializedError(operation, "await_kong_adapter")

    def check_kong_oauth2_initialized(self, operation: str) -> None:
        if not self.kong_oauth2_initialized:
            raise WickedNotInitializedError(operation, "await_kong_oauth2")

    def network_property(self, name: str) -> Any:
        """Return ``network.<name>`` from the raw globals document, or ``None``."""
        network = (self.globals_document or {}).get("network") or {}
        return network.get(name)

    def internal_url(
        self,
        property_name: str,
        default_host: str | None = None,
        default_port: int | None = None,
    ) -> str:
        """Resolve an internal service URL from ``network.<property_name>``.

        Falls back to a guessed URL when a default host and port are given.
        """
        self.check_initialized("get_internal_url")
        network = (self.globals_document or {}).get("network") or {}
        if property_name in network:
            return check_slash(network[property_name])
        if default_host and default_port:
            return check_slash(guess_service_url(default_host, default_port))
        raise WickedConfigurationError(
            f'Configuration property "{property_name}" not defined in globals: network.',
            property_name=property_name,
        )
