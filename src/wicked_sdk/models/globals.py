# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Models for the portal API ``globals`` configuration document.

The document is owned by the portal API and grows over time, so every model
accepts unknown keys and nearly every field is optional. Field names follow
Python conventions; the JSON names are kept as aliases.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WickedModel(BaseModel):
    """Base model for documents returned by the portal API."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# =============================================================================
# Enums
# =============================================================================


class StorageType(str, Enum):
    """Backing store of the portal API."""

    JSON = "json"
    POSTGRES = "postgres"


class SessionStoreType(str, Enum):
    """Session store used by the portal UI."""

    REDIS = "redis"
    FILE = "file"


# =============================================================================
# Sections
# =============================================================================


class GlobalsNetwork(WickedModel):
    """Endpoints of the deployment, internal and external."""

    schema_: str | None = Field(None, alias="schema")
    portal_host: str | None = Field(None, alias="portalHost")
    api_host: str | None = Field(None, alias="apiHost")
    api_url: str | None = Field(None, alias="apiUrl")
    portal_url: str | None = Field(None, alias="portalUrl")
    kong_adapter_url: str | None = Field(None, alias="kongAdapterUrl")
    kong_admin_url: str | None = Field(None, alias="kongAdminUrl")
    kong_oauth2_url: str | None = Field(None, alias="kongOAuth2Url")
    mailer_url: str | None = Field(None, alias="mailerUrl")
    chatbot_url: str | None = Field(None, alias="chatbotUrl")


class GlobalsDb(WickedModel):
    static_config: str | None = Field(None, alias="staticConfig")
    dynamic_config: str | None = Field(None, alias="dynamicConfig")


class GlobalsApi(WickedModel):
    header_name: str | None = Field(None, alias="headerName")


class StorageConfig(WickedModel):
    type: StorageType | None = None
    pg_host: str | None = Field(None, alias="pgHost")
    pg_port: int | None = Field(None, alias="pgPort")
    pg_user: str | None = Field(None, alias="pgUser")
    pg_password: str | None = Field(None, alias="pgPassword")


class SessionStoreConfig(WickedModel):
    type: SessionStoreType | None = None
    host: str | None = None
    port: int | None = None
    password: str | None = None


class KongAdapterConfig(WickedModel):
    use_kong_adapter: bool | None = Field(None, alias="useKongAdapter")
    # Kong plugins the adapter leaves untouched when configuring Kong
    ignore_list: list[str] = Field(default_factory=list, alias="ignoreList")


class PortalConfig(WickedModel):
    # "<auth server name>:<auth method name>", e.g. "default:local"
    auth_methods: list[str] = Field(default_factory=list, alias="authMethods")


class InitialUser(WickedModel):
    id: str | None = None
    custom_id: str | None = Field(None, alias="customId")
    name: str | None = None
    email: str | None = None
    password: str | None = None
    validated: bool | None = None
    groups: list[str] = Field(default_factory=list)


class RecaptchaConfig(WickedModel):
    use_recaptcha: bool = Field(False, alias="useRecaptcha")
    website_key: str | None = Field(None, alias="websiteKey")
    secret_key: str | None = Field(None, alias="secretKey")


class MailerConfig(WickedModel):
    sender_email: str | None = Field(None, alias="senderEmail")
    sender_name: str | None = Field(None, alias="senderName")
    smtp_host: str | None = Field(None, alias="smtpHost")
    smtp_port: int | None = Field(None, alias="smtpPort")
    username: str | None = None
    password: str | None = None
    admin_email: str | None = Field(None, alias="adminEmail")
    admin_name: str | None = Field(None, alias="adminName")


class ChatbotEventsConfig(WickedModel):
    user_signed_up: bool = Field(False, alias="userSignedUp")
    user_validated_email: bool = Field(False, alias="userValidatedEmail")
    application_added: bool = Field(False, alias="applicationAdded")
    application_deleted: bool = Field(False, alias="applicationDeleted")
    subscription_added: bool = Field(False, alias="subscriptionAdded")
    subscription_deleted: bool = Field(False, alias="subscriptionDeleted")
    approval_required: bool = Field(False, alias="approvalRequired")
    lost_password_request: bool = Field(False, alias="lostPasswordRequest")
    verify_email_request: bool = Field(False, alias="verifyEmailRequest")


class ChatbotConfig(WickedModel):
    username: str | None = None
    icon_url: str | None = None
    hook_urls: list[str] = Field(default_factory=list, alias="hookUrls")
    events: ChatbotEventsConfig | None = None


# =============================================================================
# Document
# =============================================================================


class WickedGlobals(WickedModel):
    """The ``globals`` document served by ``GET /globals``."""

    version: int | str | None = None
    title: str | None = None
    footer: str | None = None
    company: str | None = None
    # Group validated users are automatically assigned to
    validated_user_group: str | None = Field(None, alias="validatedUserGroup")
    # Used to validate that the secret config key is correct
    config_key_check: str | None = Field(None, alias="configKeyCheck")
    api: GlobalsApi | None = None
    network: GlobalsNetwork = Field(default_factory=GlobalsNetwork)
    db: GlobalsDb | None = None
    session_store: SessionStoreConfig | None = Field(None, alias="sessionStore")
    kong_adapter: KongAdapterConfig | None = Field(None, alias="kongAdapter")
    portal: PortalConfig | None = None
    storage: StorageConfig | None = None
    initial_users: list[InitialUser] = Field(default_factory=list, alias="initialUsers")
    recaptcha: RecaptchaConfig | None = None
    mailer: MailerConfig | None = None
    chatbot: ChatbotConfig | None = None
    layouts: dict[str, Any] | None = None
    views: dict[str, Any] | None = None
