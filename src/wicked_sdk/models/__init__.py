# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Models for options and portal API documents."""

from .globals import (
    GlobalsNetwork,
    InitialUser,
    SessionStoreType,
    StorageType,
    WickedGlobals,
    WickedModel,
)
from .options import AwaitOptions, InitOptions
from .portal import (
    Application,
    AuthType,
    MachineUserCreateInfo,
    Subscription,
    SubscriptionInfo,
    UserInfo,
    WickedApi,
)

__all__ = [
    # Options
    "AwaitOptions",
    "InitOptions",
    # Globals
    "WickedModel",
    "WickedGlobals",
    "GlobalsNetwork",
    "InitialUser",
    "StorageType",
    "SessionStoreType",
    # Portal entities
    "UserInfo",
    "MachineUserCreateInfo",
    "WickedApi",
    "Application",
    "AuthType",
    "Subscription",
    "SubscriptionInfo",
]
