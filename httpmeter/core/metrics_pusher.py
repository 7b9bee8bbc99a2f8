"""Periodic driver for push-based metrics export."""

import asyncio
import contextlib
from typing import Optional

from httpmeter.core.logging import logger
from httpmeter.core.protocols.exporters import MetricsPusher


class PeriodicMetricsPusher:
    """Background task that calls ``MetricsPusher.push()`` on a fixed interval.

    Pushes run in a worker thread so a slow collector never blocks the
    event loop.  A failed push is logged and the loop carries on; ``stop()``
    cancels the loop and performs one final flush so the last requests are
    not lost.
    """

    def __init__(self, pusher: MetricsPusher, interval: float = 15.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._pusher = pusher
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self.logger = logger.with_context(operation="metrics_pusher", interval=interval)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the push loop.  Calling it twice is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="httpmeter-metrics-pusher")
        self.logger.info("Periodic metrics push started")

    async def stop(self, *, flush: bool = True) -> None:
        """Cancel the push loop, then push once more if *flush* is set."""
        if self._task is None:
            return

        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

        if flush:
            await self.push_once()
        self.logger.info("Periodic metrics push stopped")

    async def push_once(self) -> bool:
        """Push immediately.  Returns ``False`` if the push failed."""
        try:
            await asyncio.to_thread(self._pusher.push)
        except Exception as exc:
            self.logger.warning(f"Metrics push failed: {exc}")
            return False
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.push_once()
