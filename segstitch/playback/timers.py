"""Cancellable one-shot wake-ups for the boundary scheduler."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class TimerHandle(Protocol):
    """A pending wake-up that can be cancelled before it fires."""

    def cancel(self) -> None:
        ...


class TimerService(Protocol):
    """Schedules callbacks after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioTimerService:
    """Timer service backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)


@dataclass(order=True)
class ManualTimer:
    """One pending wake-up on a ``ManualTimerService`` clock."""

    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimerService:
    """Virtual clock that fires wake-ups only when advanced.

    Timers due at the same instant fire in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[ManualTimer] = []
        self._sequence = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(
            due=self._now + max(0.0, delay),
            sequence=next(self._sequence),
            callback=callback,
        )
        heapq.heappush(self._queue, timer)
        return timer

    def pending(self) -> list[ManualTimer]:
        """Returns live timers ordered by due time."""
        return sorted(timer for timer in self._queue if not timer.cancelled)

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    def _pop_live(self) -> ManualTimer | None:
        self._discard_cancelled()
        if not self._queue:
            return None
        return heapq.heappop(self._queue)

    def run_next(self) -> bool:
        """Jumps the clock to the next live timer and fires it.

        Returns:
            bool: ``False`` when nothing was pending.
        """
        timer = self._pop_live()
        if timer is None:
            return False
        self._now = max(self._now, timer.due)
        timer.callback()
        return True

    def advance(self, seconds: float) -> int:
        """Moves the clock forward, firing every timer that comes due.

        Returns:
            int: Number of callbacks fired.
        """
        target = self._now + seconds
        fired = 0
        while True:
            self._discard_cancelled()
            if not self._queue or self._queue[0].due > target:
                break
            self.run_next()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, *, limit: int = 100_000) -> int:
        """Fires timers until none are pending or ``limit`` is reached."""
        fired = 0
        while fired < limit and self.run_next():
            fired += 1
        return fired
