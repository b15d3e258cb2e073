"""
services/countdown.py

One-second countdown for an exam session.

The timer never runs on its own: every tick is a single callback scheduled
through a Scheduler, and stop() cancels the pending one. A stopped timer
delivers no further ticks.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Set

from config import LOW_TIME_WARNING_SECONDS, TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...

    def spawn(self, coro: Awaitable[Any]) -> None: ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay, callback)

    def spawn(self, coro: Awaitable[Any]) -> None:
        # hold a reference until done, the loop only keeps weak ones
        task = self._get_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


class CountdownTimer:
    """
    Counts seconds_remaining down to 0, one per interval.

    Args:
        scheduler: where ticks are scheduled.
        on_tick:   called with the new value after every tick.
        on_expire: called once when the value reaches 0.
        interval:  seconds between ticks.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
        interval: float = TICK_INTERVAL_SECONDS,
    ):
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._interval = interval
        self._handle: Optional[Cancellable] = None
        self._running = False
        self.seconds_remaining = 0

    @property
    def active(self) -> bool:
        return self._running

    def reset(self, seconds: int) -> None:
        """Stop and load a new value."""
        self.stop()
        self.seconds_remaining = max(0, int(seconds))

    def start(self) -> None:
        """Start ticking. No-op if already running or nothing is left."""
        if self._running or self.seconds_remaining <= 0:
            return
        self._running = True
        self._schedule()

    def stop(self) -> None:
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._scheduler.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if not self._running:
            return

        self.seconds_remaining = max(0, self.seconds_remaining - 1)
        self._on_tick(self.seconds_remaining)

        if self.seconds_remaining == 0:
            self._running = False
            logger.info("Countdown reached 0")
            self._on_expire()
        elif self._running and self._handle is None:
            self._schedule()


def format_remaining(seconds: int) -> str:
    """125 -> '2:05'"""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def is_low_time(seconds: int) -> bool:
    return seconds < LOW_TIME_WARNING_SECONDS
