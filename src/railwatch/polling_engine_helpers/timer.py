"""Re-armable asyncio interval timer."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PollTimer:
    """
    Invokes ``callback`` every ``interval`` seconds until stopped.

    ``rearm`` restarts the current wait with a new interval immediately, so a
    changed cadence takes effect without waiting out the old period. The
    callback runs inside the timer task; stopping cancels it mid-flight.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[Any]],
        interval: float,
        *,
        name: str = "railwatch-poll-timer",
    ) -> None:
        self._callback = callback
        self._interval = interval
        self._name = name
        self._rearm_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            logger.debug("Poll timer already running")
            return
        self._stopped = False
        self._rearm_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=self._name)

    def rearm(self, interval: Optional[float] = None) -> None:
        if self._stopped:
            return
        if interval is not None:
            self._interval = interval
        self._rearm_event.set()

    async def stop(self) -> None:
        self._stopped = True
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            # Stopped from inside the callback; the loop exits on its own.
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:  # policy_guard: allow-silent-handler
            logger.debug("Timer task %s cancelled", task.get_name())

    async def _run(self) -> None:
        while not self._stopped:
            self._rearm_event.clear()
            try:
                await asyncio.wait_for(self._rearm_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
                pass
            else:
                continue
            if self._stopped:
                return
            try:
                await self._callback()
            except Exception:  # Keep ticking; the cycle reports its own failures  # policy_guard: allow-silent-handler
                logger.exception("Poll timer callback failed; next tick in %.0fs", self._interval)


__all__ = ["PollTimer"]
