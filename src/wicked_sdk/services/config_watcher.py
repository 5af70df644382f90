# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Config hash watcher: detects hot-reloaded portal configuration.

Runs as a background asyncio task once the client is initialized:
1. Every ``config_hash_poll_interval`` seconds, GET ``<api>/confighash``
2. Transport error / non-200: mark the portal API unreachable, wait for next tick
3. Hash differs from the one seen at bootstrap: mark a shutdown as pending
   and, ``exit_grace_seconds`` later, notify the stale listeners once

The watcher never terminates the process itself. Hosts that want the
classic "exit and let the orchestrator restart me" behaviour set
``exit_on_stale`` (``InitOptions.exit_on_config_change``), which runs
:func:`exit_process` after all listeners.
"""

import asyncio
import inspect
import sys
from typing import Any, Callable

import httpx
import structlog

from ..config import get_settings
from ..metrics import record_config_hash_check
from ..session import SessionState

logger = structlog.get_logger(__name__)

StaleListener = Callable[[], Any]


def exit_process() -> None:
    """Terminate the process with exit code 0 because the configuration went stale."""
    logger.warning("Exiting component due to outdated configuration (confighash mismatch).")
    sys.exit(0)


class ConfigWatcher:
    """Background asyncio task comparing the remote config hash to the cached one."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        session: SessionState,
        interval_seconds: float | None = None,
        grace_seconds: float | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._http = http
        self._session = session
        self._interval = (
            interval_seconds if interval_seconds is not None else settings.config_hash_poll_interval
        )
        self._grace = grace_seconds if grace_seconds is not None else settings.exit_grace_seconds
        self._timeout = timeout if timeout is not None else settings.portal_api_timeout
        self._task: asyncio.Task | None = None
        self._running = False
        self._notify_handle: asyncio.TimerHandle | None = None
        self._stale_event = asyncio.Event()
        self._listeners: list[StaleListener] = []
        self._pending_listener_tasks: set[asyncio.Future] = set()
        self.detected_hash: str | None = None
        # Run exit_process after the listeners
        self.exit_on_stale = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def is_stale(self) -> bool:
        """True once the stale notification has fired."""
        return self._stale_event.is_set()

    def add_listener(self, listener: StaleListener) -> None:
        """Register a callable (sync or async) run when the config went stale."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StaleListener) -> None:
        self._listeners.remove(listener)

    async def wait_until_stale(self) -> None:
        """Block until the stale notification fires."""
        await self._stale_event.wait()

    async def start(self) -> None:
        """Start the watch loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("config_watcher_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the watch loop and drop a pending notification."""
        self._running = False
        if self._notify_handle:
            self._notify_handle.cancel()
            self._notify_handle = None
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("config_watcher_stopped")

    async def _loop(self) -> None:
        """Run a check on every interval."""
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                await self.check_once()
            except Exception as e:
                logger.error("config_watcher_error", error=str(e))

    async def check_once(self) -> bool:
        """Execute one check.

        Returns:
            True if the remote hash differs from the cached one
        """
        url = f"{self._session.api_url}confighash"
        try:
            response = await self._http.get(url, timeout=self._timeout)
        except httpx.RequestError as e:
            self._session.api_reachable = False
            record_config_hash_check("unreachable")
            logger.error("config_hash_check_failed", url=url, error=str(e))
            return False

        if response.status_code != 200:
            self._session.api_reachable = False
            record_config_hash_check("unreachable")
            logger.error(
                "config_hash_check_unexpected_status",
                url=url,
                status_code=response.status_code,
            )
            return False

        self._session.api_reachable = True
        config_hash = response.text
        if config_hash == self._session.config_hash:
            record_config_hash_check("unchanged")
            return False

        record_config_hash_check("changed")
        if self._session.pending_exit:
            # Already scheduled on an earlier tick
            return True

        logger.warning(
            "Detected new configuration version, scheduling stale notification",
            grace_seconds=self._grace,
        )
        self.detected_hash = config_hash
        self._session.pending_exit = True
        self._notify_handle = asyncio.get_running_loop().call_later(
            self._grace, self._notify_stale
        )
        return True

    def _notify_stale(self) -> None:
        self._notify_handle = None
        self._stale_event.set()
        for listener in list(self._listeners):
            try:
                result = listener()
            except Exception as e:
                logger.error("stale_listener_failed", listener=repr(listener), error=str(e))
                continue
            if inspect.isawaitable(result):
                future = asyncio.ensure_future(result)
                self._pending_listener_tasks.add(future)
                future.add_done_callback(self._pending_listener_tasks.discard)
        if self.exit_on_stale:
            exit_process()
