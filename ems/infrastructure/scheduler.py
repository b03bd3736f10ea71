"""Timers for the list view, on top of the asyncio event loop.

All times are in milliseconds. The clock is injectable so that time can be
simulated without real delays.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock plus one-shot and periodic timers."""

    def now(self) -> float: ...

    def call_later(
        self, delay_ms: float, callback: Callable[[], None]
    ) -> TimerHandle: ...

    def call_every(
        self, interval_ms: float, callback: Callable[[], None]
    ) -> TimerHandle: ...


class PeriodicHandle:
    """Re-arms ``callback`` every ``interval`` seconds until cancelled."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = None
        self._arm()

    def _arm(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        self._callback()
        # the callback may have cancelled us
        if not self._cancelled:
            self._arm()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """``Scheduler`` backed by the running event loop.

    Args:
        clock: Returns seconds from an arbitrary monotonic origin
        loop: Event loop to schedule on; defaults to the running loop at call time
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self._clock = clock
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._clock() * 1000

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return self._get_loop().call_later(delay_ms / 1000, callback)

    def call_every(
        self, interval_ms: float, callback: Callable[[], None]
    ) -> TimerHandle:
        return PeriodicHandle(self._get_loop(), interval_ms / 1000, callback)
