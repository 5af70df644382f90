# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""SDK services: retry-poll, config watcher and machine user bootstrap."""

from .await_url import await_url
from .config_watcher import ConfigWatcher, exit_process
from .machine_user import init_machine_user, make_machine_user_custom_id

__all__ = [
    "await_url",
    "ConfigWatcher",
    "exit_process",
    "init_machine_user",
    "make_machine_user_custom_id",
]
