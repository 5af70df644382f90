# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""URL helpers: base URL resolution and service URL guessing."""

import ipaddress
import platform
import socket

import structlog

from .config import Settings

logger = structlog.get_logger(__name__)

DEFAULT_PORTAL_API_HOST = "portal-api"
DEFAULT_PORTAL_API_PORT = 3001


def check_slash(url: str) -> str:
    """Return ``url`` with exactly one trailing slash appended if missing."""
    return url if url.endswith("/") else url + "/"


def check_no_slash(url: str) -> str:
    """Return ``url`` without a single trailing slash."""
    return url[:-1] if url.endswith("/") else url


def get_local_ips() -> list[str]:
    """Return the non-loopback IPv4 addresses of this host."""
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except socket.gaierror as e:
        logger.debug("local_ip_lookup_failed", error=str(e))
        return []

    addresses: list[str] = []
    for *_, sockaddr in infos:
        address = sockaddr[0]
        if ipaddress.ip_address(address).is_loopback or address in addresses:
            continue
        addresses.append(address)
    return addresses


def get_default_local_ip() -> str:
    local_ips = get_local_ips()
    return local_ips[0] if local_ips else "localhost"


def guess_service_url(default_host: str, default_port: int) -> str:
    """Guess the URL of a deployment service from its conventional host name.

    Inside a container network (Linux) services resolve by name; elsewhere
    we assume local development and use this machine's address instead.
    """
    host = default_host
    if platform.system() != "Linux":
        host = get_default_local_ip()
    url = f"http://{host}:{default_port}/"
    logger.debug("guessed_service_url", default_host=default_host, url=url)
    return url


def resolve_api_url(settings: Settings) -> str:
    """Resolve the portal API base URL, always with a trailing slash."""
    api_url = settings.portal_api_url
    if not api_url:
        api_url = guess_service_url(DEFAULT_PORTAL_API_HOST, DEFAULT_PORTAL_API_PORT)
        logger.warning(
            "PORTAL_API_URL is not set, using guessed default. "
            "If this is not correct, please set it before starting this process.",
            api_url=api_url,
        )
    return check_slash(api_url)
