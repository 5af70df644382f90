# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""wicked portal API client.

Usage::

    async with WickedClient() as wicked:
        await wicked.initialize(InitOptions(user_agent_name="my-service", user_agent_version="1.0.0"))
        await wicked.init_machine_user("my-service")
        apis = await wicked.api_get("apis")

``initialize`` waits for the portal API, reads the config hash and the
``globals`` document, then starts the config watcher. Everything else
requires a successful ``initialize``.
"""

import json
import re
from typing import Any

import httpx
import structlog

from .clients import KongAdapterClient, KongOAuth2Client, PortalApiClient
from .config import Settings, get_settings
from .errors import (
    WickedApiError,
    WickedConfigurationError,
    WickedError,
    WickedErrorCode,
    WickedParseError,
    WickedUnsupportedVersionError,
    WickedValidationError,
)
from .models import AwaitOptions, InitOptions, SubscriptionInfo, UserInfo, WickedGlobals
from .network import check_no_slash, check_slash, resolve_api_url
from .services import ConfigWatcher, await_url
from .services import init_machine_user as _init_machine_user
from .services.config_watcher import StaleListener
from .session import SessionState, VersionCapabilities

logger = structlog.get_logger(__name__)

CLIENT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-]+$")


class WickedClient:
    """Client for the wicked portal API and its Kong adapter services.

    One instance holds one session. The underlying ``httpx.AsyncClient`` is
    owned by the instance unless passed in via ``http``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(transport=transport)
        self.session = SessionState()
        self.portal = PortalApiClient(self._http, self.session, self.settings.portal_api_timeout)
        self.kong_adapter = KongAdapterClient(self._http, self.session, self.settings.kong_timeout)
        self.oauth2 = KongOAuth2Client(self._http, self.session, self.settings.kong_timeout)
        self.watcher = ConfigWatcher(
            self._http,
            self.session,
            interval_seconds=self.settings.config_hash_poll_interval,
            grace_seconds=self.settings.exit_grace_seconds,
            timeout=self.settings.portal_api_timeout,
        )

    async def __aenter__(self) -> "WickedClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the config watcher and close the HTTP client."""
        await self.watcher.stop()
        if self._owns_http:
            await self._http.aclose()

    # =========================================================================
    # BOOTSTRAP
    # =========================================================================

    async def initialize(self, options: InitOptions | dict[str, Any] | None = None) -> WickedGlobals:
        """Bootstrap the session against the portal API.

        Args:
            options: Init options, or a dict validated into :class:`InitOptions`

        Returns:
            The typed ``globals`` document

        Raises:
            WickedValidationError: Invalid options (no network access made)
            WickedAwaitError: The portal API did not answer ``ping`` in time
            WickedApiError: ``confighash`` or ``globals`` returned non-200
            WickedParseError: ``ping`` or ``globals`` is not valid JSON
            httpx.RequestError: Transport failure
        """
        options = self._validate_init_options(options)
        settings = self.settings

        api_url = resolve_api_url(settings)
        logger.info("Initializing wicked SDK", api_url=api_url, user_agent=options.user_agent)

        ping_body = await self.await_url(f"{api_url}ping", options.await_options())
        try:
            ping = json.loads(ping_body)
        except ValueError as e:
            raise WickedParseError(f"GET {api_url}ping did not return JSON: {e}", body=ping_body) from e
        capabilities = VersionCapabilities.from_ping(ping)
        logger.debug("portal_api_ping", api_version=capabilities.api_version)

        response = await self._http.get(f"{api_url}confighash", timeout=settings.portal_api_timeout)
        if response.status_code != 200:
            raise WickedApiError(
                f"GET {api_url}confighash returned unexpected status code {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        config_hash = response.text

        headers = {"X-Config-Hash": config_hash}
        if options.user_agent:
            headers["User-Agent"] = options.user_agent
        response = await self._http.get(
            f"{api_url}globals", headers=headers, timeout=settings.portal_api_timeout
        )
        if response.status_code != 200:
            raise WickedApiError(
                f"GET {api_url}globals returned unexpected status code {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            globals_document = response.json()
        except ValueError as e:
            raise WickedParseError(
                f"GET {api_url}globals did not return JSON: {e}",
                body=response.text,
                status_code=response.status_code,
            ) from e
        if not isinstance(globals_document, dict):
            raise WickedParseError(
                f"GET {api_url}globals did not return a JSON object",
                body=response.text,
                status_code=response.status_code,
            )
        wicked_globals = WickedGlobals.model_validate(globals_document)

        session = self.session
        session.api_url = api_url
        session.capabilities = capabilities
        session.config_hash = config_hash
        session.user_agent = options.user_agent
        session.globals_document = globals_document
        session.globals = wicked_globals
        session.api_reachable = True
        session.pending_exit = False
        session.initialized = True
        logger.info(
            "wicked_sdk_initialized",
            api_version=capabilities.api_version,
            config_hash=config_hash,
        )

        self.watcher.exit_on_stale = options.exit_on_config_change
        if not options.do_not_poll_config_hash:
            await self.watcher.start()
        return wicked_globals

    def _default_await_options(self) -> dict[str, Any]:
        """Await parameters configured on this client's settings."""
        return {
            "status_code": self.settings.await_status_code,
            "max_tries": self.settings.await_max_tries,
            "retry_delay": self.settings.await_retry_delay,
        }

    def _with_client_defaults(self, options: AwaitOptions) -> AwaitOptions:
        unset = {
            name: value
            for name, value in self._default_await_options().items()
            if name not in options.model_fields_set
        }
        return options.model_copy(update=unset) if unset else options

    def _validate_init_options(self, options: InitOptions | dict[str, Any] | None) -> InitOptions:
        if options is None:
            options = InitOptions()
        elif not isinstance(options, InitOptions):
            try:
                options = InitOptions.model_validate(options)
            except ValueError as e:
                raise WickedValidationError(
                    f"Invalid init options: {e}", details={"options": options}
                ) from e
        return self._with_client_defaults(options)  # type: ignore[return-value]

    async def await_url(self, url: str, options: AwaitOptions | None = None) -> str:
        """Poll ``url`` until it answers with the expected status code.

        Parameters not given in ``options`` come from the client's settings.
        """
        options = self._with_client_defaults(options or AwaitOptions())
        return await await_url(
            self._http, url, options, attempt_timeout=self.settings.await_attempt_timeout
        )

    def set_correlation_id(self, correlation_id: str | None) -> None:
        """Set the ``Correlation-Id`` sent when no request context provides one."""
        self.session.correlation_id = correlation_id or None

    async def init_machine_user(self, service_id: str) -> UserInfo:
        """Look up or create the machine user and discover the portal API scope."""
        return await _init_machine_user(self.portal, self.session, service_id)

    async def await_kong_adapter(self, options: AwaitOptions | None = None) -> str:
        """Wait for the Kong adapter and enable the :attr:`kong_adapter` operations."""
        self.session.check_initialized("await_kong_adapter")
        body = await self.await_url(f"{self.kong_adapter.base_url()}ping", options)
        self.session.kong_adapter_initialized = True
        return body

    async def await_kong_oauth2(self, options: AwaitOptions | None = None) -> str:
        """Wait for the Kong OAuth2 service and enable the :attr:`oauth2` operations."""
        self.session.check_initialized("await_kong_oauth2")
        if not self.session.is_v100_or_higher:
            raise WickedUnsupportedVersionError(
                "await_kong_oauth2", "1.0.0", self.session.api_version
            )
        body = await self.await_url(f"{self.oauth2.base_url()}ping", options)
        self.session.kong_oauth2_initialized = True
        return body

    # =========================================================================
    # STALE CONFIGURATION
    # =========================================================================

    def add_stale_listener(self, listener: StaleListener) -> None:
        """Register a callable run once a configuration change was detected."""
        self.watcher.add_listener(listener)

    def remove_stale_listener(self, listener: StaleListener) -> None:
        self.watcher.remove_listener(listener)

    async def wait_until_stale(self) -> None:
        await self.watcher.wait_until_stale()

    @property
    def is_stale(self) -> bool:
        return self.watcher.is_stale

    # =========================================================================
    # SESSION FLAGS
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self.session.initialized

    @property
    def api_reachable(self) -> bool:
        return self.session.api_reachable

    @property
    def pending_exit(self) -> bool:
        return self.session.pending_exit

    @property
    def api_version(self) -> str | None:
        return self.session.api_version

    @property
    def is_v012_or_higher(self) -> bool:
        return self.session.is_v012_or_higher

    @property
    def is_v100_or_higher(self) -> bool:
        return self.session.is_v100_or_higher

    @property
    def machine_user_id(self) -> str | None:
        return self.session.machine_user_id

    # =========================================================================
    # INFO ACCESSORS
    # =========================================================================

    def get_globals(self) -> WickedGlobals:
        self.session.check_initialized("get_globals")
        return self.session.globals  # type: ignore[return-value]

    def get_config_hash(self) -> str:
        self.session.check_initialized("get_config_hash")
        return self.session.config_hash or ""

    def get_schema(self) -> str:
        self.session.check_initialized("get_schema")
        schema = self.session.network_property("schema")
        if schema:
            return schema
        logger.error("In globals, network.schema is not defined. Defaulting to https.")
        return "https"

    def is_development_mode(self) -> bool:
        """Return False only when the deployment is served over https."""
        self.session.check_initialized("is_development_mode")
        return self.session.network_property("schema") != "https"

    def _external_host(self, operation: str, property_name: str) -> str:
        self.session.check_initialized(operation)
        host = self.session.network_property(property_name)
        if not host:
            raise WickedConfigurationError(
                f"In globals, network.{property_name} is not defined. Cannot return any default.",
                property_name=property_name,
            )
        return check_no_slash(host)

    def get_external_portal_host(self) -> str:
        return self._external_host("get_external_portal_host", "portalHost")

    def get_external_portal_url(self) -> str:
        return check_slash(f"{self.get_schema()}://{self.get_external_portal_host()}")

    def get_external_api_host(self) -> str:
        return self._external_host("get_external_api_host", "apiHost")

    def get_external_api_url(self) -> str:
        return check_slash(f"{self.get_schema()}://{self.get_external_api_host()}")

    def get_internal_api_url(self) -> str:
        self.session.check_initialized("get_internal_api_url")
        return check_slash(self.session.api_url or "")

    def get_portal_api_scope(self) -> str:
        """Return the discovered portal API scope, empty before 1.0.0."""
        self.session.check_initialized("get_portal_api_scope")
        if self.session.is_v100_or_higher and self.session.portal_api_scope:
            return self.session.portal_api_scope
        logger.warning("get_portal_api_scope: not a v1.0.0+ API or scope not discovered")
        return ""

    def get_internal_kong_admin_url(self) -> str:
        return self.session.internal_url("kongAdminUrl", "kong", 8001)

    def get_internal_kong_adapter_url(self) -> str:
        return self.kong_adapter.base_url()

    def get_internal_kong_oauth2_url(self) -> str:
        return self.oauth2.base_url()

    def get_internal_chatbot_url(self) -> str:
        return self.session.internal_url("chatbotUrl", "portal-chatbot", 3004)

    def get_internal_mailer_url(self) -> str:
        return self.session.internal_url("mailerUrl", "portal-mailer", 3003)

    def get_internal_url(self, property_name: str) -> str:
        """Return ``network.<property_name>`` with a trailing slash; no default."""
        return self.session.internal_url(property_name)

    # =========================================================================
    # PORTAL API VERBS
    # =========================================================================

    async def api_get(self, path: str, user_id: str | None = None, scope: str | None = None) -> Any:
        self.session.check_initialized("api_get")
        return await self.portal.get(path, user_id, scope)

    async def api_post(
        self, path: str, body: Any, user_id: str | None = None, scope: str | None = None
    ) -> Any:
        self.session.check_initialized("api_post")
        return await self.portal.post(path, body, user_id, scope)

    async def api_put(
        self, path: str, body: Any, user_id: str | None = None, scope: str | None = None
    ) -> Any:
        self.session.check_initialized("api_put")
        return await self.portal.put(path, body, user_id, scope)

    async def api_patch(
        self, path: str, body: Any, user_id: str | None = None, scope: str | None = None
    ) -> Any:
        self.session.check_initialized("api_patch")
        return await self.portal.patch(path, body, user_id, scope)

    async def api_delete(self, path: str, user_id: str | None = None, scope: str | None = None) -> Any:
        self.session.check_initialized("api_delete")
        return await self.portal.delete(path, user_id, scope)

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    async def get_subscription_by_client_id(self, client_id: str, api_id: str) -> SubscriptionInfo:
        """Identify the application subscribed to ``api_id`` with ``client_id``.

        Raises:
            WickedValidationError: Malformed client_id
            WickedError: Unknown client_id, or subscribed to a different API
        """
        self.session.check_initialized("get_subscription_by_client_id")
        if not client_id or not CLIENT_ID_PATTERN.match(client_id):
            raise WickedValidationError("Invalid client_id format.", details={"client_id": client_id})

        try:
            payload = await self.portal.get(f"subscriptions/{client_id}")
        except (WickedError, httpx.RequestError) as e:
            logger.debug("subscription_lookup_failed", client_id=client_id, error=str(e))
            raise WickedError(
                WickedErrorCode.UNEXPECTED_RESPONSE,
                "Could not identify application with given client_id.",
                details={"client_id": client_id},
            ) from e

        if not isinstance(payload, dict) or not payload.get("subscription"):
            raise WickedError(
                WickedErrorCode.UNEXPECTED_RESPONSE,
                "Could not successfully retrieve subscription information.",
                details={"client_id": client_id},
            )
        info = SubscriptionInfo.model_validate(payload)
        if info.subscription.api != api_id:
            logger.debug(
                "subscription_api_mismatch", subscribed_api=info.subscription.api, api_id=api_id
            )
            raise WickedError(
                WickedErrorCode.VALIDATION_ERROR,
                "Bad request. The client_id does not match the API.",
                details={"client_id": client_id, "api_id": api_id},
            )
        logger.debug("subscription_identified", application=info.subscription.application)
        return info
