# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Machine user and portal API scope bootstrap.

Non-interactive components act on the portal API as a service-account
("machine") user. The user is looked up by a synthetic custom id derived
from the service id and created on first start. Afterwards the scopes of the
portal API itself are fetched and joined into the default scope string for
all subsequent calls.
"""

import re
from urllib.parse import quote

import structlog

from ..clients.portal_api import PortalApiClient
from ..errors import WickedApiError, WickedError, WickedErrorCode, WickedValidationError
from ..models import MachineUserCreateInfo, UserInfo, WickedApi
from ..session import SessionState

logger = structlog.get_logger(__name__)

SERVICE_ID_PATTERN = re.compile(r"^[a-zA-Z\-_0-9]+$")
PORTAL_API_ID = "portal-api"
MACHINE_USER_EMAIL_DOMAIN = "wicked.haufe.io"


def make_machine_user_custom_id(service_id: str) -> str:
    return f"internal:{service_id}"


def validate_service_id(service_id: str) -> None:
    if not service_id or not SERVICE_ID_PATTERN.match(service_id):
        raise WickedValidationError(
            "Invalid Service ID, must only contain a-z, A-Z, 0-9, - and _.",
            details={"service_id": service_id},
        )


def _store_machine_user(session: SessionState, user: UserInfo) -> None:
    logger.debug("Setting machine user id", machine_user_id=user.id)
    session.machine_user_id = user.id


async def create_machine_user(
    portal: PortalApiClient, session: SessionState, service_id: str
) -> UserInfo:
    """Create the machine user for ``service_id``."""
    create_info = MachineUserCreateInfo(
        custom_id=make_machine_user_custom_id(service_id),
        last_name=service_id,
        email=f"{service_id}@{MACHINE_USER_EMAIL_DOMAIN}",
    )
    created = await portal.post("users/machine", create_info.model_dump(by_alias=True))
    user = UserInfo.model_validate(created)
    logger.info("machine_user_created", service_id=service_id, user_id=user.id)
    _store_machine_user(session, user)
    return user


async def retrieve_or_create_machine_user(
    portal: PortalApiClient, session: SessionState, service_id: str
) -> UserInfo:
    """Look up the machine user of ``service_id``, creating it if absent."""
    validate_service_id(service_id)

    custom_id = make_machine_user_custom_id(service_id)
    try:
        users = await portal.get(f"users?customId={quote(custom_id, safe='')}", scope="read_users")
    except WickedApiError as e:
        if e.status_code == 404:
            return await create_machine_user(portal, session, service_id)
        raise

    if not isinstance(users, list):
        raise WickedError(
            WickedErrorCode.UNEXPECTED_RESPONSE,
            f"GET of user with customId {custom_id} did not return expected array.",
            details={"custom_id": custom_id},
        )
    if len(users) != 1:
        raise WickedError(
            WickedErrorCode.UNEXPECTED_RESPONSE,
            f"GET of user with customId {custom_id} did not return array of length 1 "
            f"(length == {len(users)}).",
            details={"custom_id": custom_id, "count": len(users)},
        )
    user = UserInfo.model_validate(users[0])
    _store_machine_user(session, user)
    return user


async def init_portal_api_scopes(portal: PortalApiClient, session: SessionState) -> str:
    """Discover the full scope of the portal API and cache it on the session."""
    if not session.machine_user_id:
        raise WickedError(
            WickedErrorCode.NOT_INITIALIZED,
            "init_portal_api_scopes: Machine user id not initialized.",
        )

    api = WickedApi.model_validate(await portal.get(f"apis/{PORTAL_API_ID}", scope="read_apis"))
    if api.settings is None:
        raise WickedError(
            WickedErrorCode.UNEXPECTED_RESPONSE,
            "init_portal_api_scopes: Property settings not found.",
        )
    if api.settings.scopes is None:
        raise WickedError(
            WickedErrorCode.UNEXPECTED_RESPONSE,
            "init_portal_api_scopes: Property settings.scopes not found.",
        )

    session.portal_api_scope = " ".join(api.settings.scopes.keys())
    logger.debug("Full portal API scope", scope=session.portal_api_scope)
    return session.portal_api_scope


async def init_machine_user(
    portal: PortalApiClient, session: SessionState, service_id: str
) -> UserInfo:
    """Provision the machine user of ``service_id`` and the default scope."""
    session.check_initialized("init_machine_user")
    user = await retrieve_or_create_machine_user(portal, session, service_id)
    await init_portal_api_scopes(portal, session)
    return user
