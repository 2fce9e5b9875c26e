"""Cancellable periodic background task.

Both background processes (mood drift, autonomous actions) share the same
lifecycle: a stopped/running state machine driving an asyncio task that
sleeps for a fixed interval and then runs one synchronous tick.

Ticks are plain functions rather than coroutines so a tick can never yield
control halfway through mutating shared state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class PeriodicLoop:
    """Base class for start/stop-able periodic ticks.

    Subclasses implement ``tick()``. The loop checks the running flag
    before every tick and ``stop()`` cancels the pending sleep, so no tick
    fires once ``stop()`` has returned.
    """

    name = "periodic loop"

    def __init__(self, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.interval_seconds = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start ticking every ``interval_seconds``."""
        if self._running:
            logger.debug(f"{self.name} already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"{self.name} started (every {self.interval_seconds:.0f}s)")

    async def stop(self) -> None:
        """Stop ticking and cancel any pending tick."""
        if not self._running and self._task is None:
            return

        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info(f"{self.name} stopped")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                if self._running:
                    self.tick()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"{self.name} tick error: {e}")

    def tick(self) -> None:
        raise NotImplementedError
