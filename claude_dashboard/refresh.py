"""Refresh controller: credential -> usage fetch -> view model, one cycle at a time."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from loguru import logger

from claude_dashboard.state import MetricsSnapshot, ViewModel
from claude_dashboard.usage_api import DEFAULT_TIMEOUT_MS

REFRESH_INTERVAL = 60.0
NO_CREDENTIALS = "No credentials found"

CredentialSource = Callable[[], Awaitable[str | None]]
UsageFetcher = Callable[[str, int], Awaitable[MetricsSnapshot | None]]
Sleep = Callable[[float], Awaitable[None]]

log = logger.bind(component="refresh")


class RefreshController:
    """Runs refresh cycles against ``model``, never more than one at a time.

    ``on_change`` is called after every mutation of the model so the caller
    can repaint. ``clock`` returns epoch seconds.
    """

    def __init__(
        self,
        model: ViewModel,
        get_credential: CredentialSource,
        fetch_usage: UsageFetcher,
        on_change: Callable[[], None],
        clock: Callable[[], float] = time.time,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.model = model
        self._get_credential = get_credential
        self._fetch_usage = fetch_usage
        self._on_change = on_change
        self._clock = clock
        self._timeout_ms = timeout_ms
        self._busy = False
        self._task: asyncio.Task[None] | None = None

    @property
    def busy(self) -> bool:
        return self._busy

    def trigger(self) -> asyncio.Task[None] | None:
        """Start a cycle in the background. Returns ``None`` if one is in flight."""
        if self._busy:
            log.debug("Refresh already in flight, trigger ignored")
            return None
        self._busy = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def refresh(self) -> bool:
        """Run a cycle to completion. Returns ``False`` if one was already in flight."""
        if self._busy:
            log.debug("Refresh already in flight, skipped")
            return False
        self._busy = True
        await self._run()
        return True

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self) -> None:
        try:
            await self._cycle()
        finally:
            self._busy = False

    async def _cycle(self) -> None:
        model = self.model
        log.debug(f"Refresh #{model.refresh_count + 1} started")
        model.loading = True
        model.error = None
        self._on_change()

        try:
            token = await self._get_credential()
            if not token:
                model.error = NO_CREDENTIALS
                model.loading = False
                self._on_change()
                return
            metrics = await self._fetch_usage(token, self._timeout_ms)
        except Exception as exc:  # noqa: BLE001
            log.exception("Refresh failed unexpectedly")
            model.error = f"Failed to fetch: {exc or 'unknown error'}"
            model.loading = False
            self._on_change()
            return

        model.metrics = metrics
        model.loading = False
        model.last_refresh_at = self._clock()
        model.refresh_count += 1
        log.info(
            f"Refresh #{model.refresh_count} finished "
            f"({'no data' if metrics is None else 'ok'})"
        )
        self._on_change()


class PeriodicTimer:
    """Calls ``callback`` every ``interval`` seconds until stopped."""

    def __init__(
        self,
        interval: float,
        callback: Callable[[], object],
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self._callback = callback
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _loop(self) -> None:
        while True:
            await self._sleep(self.interval)
            self._callback()
