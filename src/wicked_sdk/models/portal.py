# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Portal API entities used by the SDK's own operations."""

from enum import Enum

from pydantic import Field

from .globals import WickedModel


class AuthType(str, Enum):
    """Authentication type of a subscription."""

    KEY_AUTH = "key-auth"
    OAUTH2 = "oauth2"


class OwnerRole(str, Enum):
    OWNER = "owner"
    COLLABORATOR = "collaborator"
    READER = "reader"


class UserInfo(WickedModel):
    """A portal user as returned by ``GET /users``."""

    id: str
    custom_id: str | None = Field(None, alias="customId")
    email: str | None = None
    validated: bool | None = None
    groups: list[str] = Field(default_factory=list)


class MachineUserCreateInfo(WickedModel):
    """Body of ``POST /users/machine``."""

    custom_id: str = Field(alias="customId")
    first_name: str = Field("Machine-User", alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    validated: bool = True
    groups: list[str] = Field(default_factory=lambda: ["admin"])


class ApiScope(WickedModel):
    description: str | None = None


class ApiSettings(WickedModel):
    enable_client_credentials: bool | None = None
    enable_implicit_grant: bool | None = None
    enable_authorization_code: bool | None = None
    enable_password_grant: bool | None = None
    token_expiration: str | None = None
    scopes: dict[str, ApiScope] | None = None
    tags: list[str] = Field(default_factory=list)
    plans: list[str] = Field(default_factory=list)
    internal: bool | None = None


class WickedApi(WickedModel):
    """An API registered with the portal, as returned by ``GET /apis/<id>``."""

    id: str
    name: str | None = None
    desc: str | None = None
    auth: str | None = None
    auth_servers: list[str] | None = Field(None, alias="authServers")
    auth_methods: list[str] | None = Field(None, alias="authMethods")
    registration_pool: str | None = Field(None, alias="registrationPool")
    required_group: str | None = Field(None, alias="requiredGroup")
    settings: ApiSettings | None = None


class Owner(WickedModel):
    user_id: str = Field(alias="userId")
    email: str | None = None
    role: OwnerRole | None = None


class Application(WickedModel):
    id: str
    name: str | None = None
    redirect_uri: str | None = Field(None, alias="redirectUri")
    confidential: bool | None = None
    owner_list: list[Owner] = Field(default_factory=list, alias="ownerList")


class Subscription(WickedModel):
    application: str
    api: str
    plan: str | None = None
    auth: AuthType | None = None
    apikey: str | None = None
    client_id: str | None = Field(None, alias="clientId")
    client_secret: str | None = Field(None, alias="clientSecret")
    approved: bool | None = None
    trusted: bool | None = None


class SubscriptionInfo(WickedModel):
    """Response of ``GET /subscriptions/<clientId>``."""

    application: Application | None = None
    subscription: Subscription
