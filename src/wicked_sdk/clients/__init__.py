# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""HTTP dispatchers for the portal API and the Kong adapter services."""

from .base import AdapterClient
from .kong_adapter import KongAdapterClient
from .kong_oauth2 import KongOAuth2Client
from .portal_api import PortalApiClient

__all__ = [
    "AdapterClient",
    "KongAdapterClient",
    "KongOAuth2Client",
    "PortalApiClient",
]
