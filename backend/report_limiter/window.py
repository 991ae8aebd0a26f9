"""Periodic bulk reset of report counts.

Runs beside the lazy TTL sweep in :class:`AccessLimiter`; the two are
separate mechanisms and a tick leaves last-access times in place.
"""

from __future__ import annotations

import asyncio
import logging

from .metrics import WINDOW_RESETS_TOTAL
from .rate_limit import AccessLimiter

logger = logging.getLogger("report_limiter.window")


class WindowResetter:
    """Clears all counts every ``interval_seconds`` (the configured TTL)."""

    def __init__(self, limiter: AccessLimiter, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._limiter = limiter
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background reset loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._reset_loop())

    async def stop(self) -> None:
        """Cancel the reset loop and wait for it to exit."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def tick(self) -> int:
        cleared = self._limiter.clear_counts()
        WINDOW_RESETS_TOTAL.inc()
        logger.info(
            "Clearing counts for all URLs",
            extra={"event": "window_reset", "cleared": cleared},
        )
        return cleared

    async def _reset_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.tick()
