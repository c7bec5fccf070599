"""
Timers on a single cooperative timeline.

Two kinds of timers exist: a one-shot delay (scripted opponent "thinking") and a recurring call (reconciliation poll).
Both hand back a handle whose cancel() prevents any further invocation.
"""

import asyncio
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """Run callback once, after 'delay' seconds."""
        ...

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        """Run callback every 'interval' seconds until the handle is cancelled."""
        ...


class RepeatingCall:
    """Handle of a recurring call: re-arms a one-shot timer after every invocation."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callback
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._timer: Optional[asyncio.TimerHandle] = loop.call_later(
            interval, self._run
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run(self) -> None:
        if self._cancelled:
            return
        # Re-arm first: an exception in the callback must not stop the recurring call.
        self._timer = self._loop.call_later(self._interval, self._run)
        self._callback()


class AsyncioScheduler:
    """Scheduler running on an asyncio event loop (one thread, callbacks never overlap)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        logger.debug("Scheduling one-shot call in %.3fs", delay)
        return self.loop.call_later(delay, callback)

    def call_every(self, interval: float, callback: Callback) -> RepeatingCall:
        logger.debug("Scheduling recurring call every %.3fs", interval)
        return RepeatingCall(self.loop, interval, callback)
