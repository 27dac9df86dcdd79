"""
Timer primitives used to drive the playhead.

A scheduler runs a callable after a delay in milliseconds and returns a
handle that can be cancelled. A delay of 0 means "as soon as possible" but
never synchronously.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol


class Scheduler(Protocol):
    def schedule(self, fn: Callable[[], Any], delay: Optional[float] = 0) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class AsyncioScheduler:
    """
    Scheduler backed by an asyncio event loop.

    The running loop is looked up on first use when none is given, so the
    timeline can be built outside of a coroutine.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, fn: Callable[[], Any], delay: Optional[float] = 0) -> asyncio.Handle:
        if not delay or delay <= 0:
            return self.loop.call_soon(fn)
        return self.loop.call_later(delay / 1000, fn)

    def cancel(self, handle: Optional[asyncio.Handle]) -> None:
        if handle is not None:
            handle.cancel()


@dataclass(order=True)
class ScheduledCall:
    """An entry in the ManualScheduler queue."""
    due: float
    seq: int
    fn: Callable[[], Any] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by a virtual millisecond clock.

    Nothing runs until advance() or run_until_idle() is called. Calls due at
    the same time run in the order they were scheduled.
    """

    def __init__(self):
        self.now: float = 0.0
        self._queue: List[ScheduledCall] = []
        self._counter = itertools.count()

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)

    def schedule(self, fn: Callable[[], Any], delay: Optional[float] = 0) -> ScheduledCall:
        call = ScheduledCall(self.now + max(delay or 0, 0), next(self._counter), fn)
        heapq.heappush(self._queue, call)
        return call

    def cancel(self, handle: Optional[ScheduledCall]) -> None:
        if handle is not None:
            handle.cancel()

    def advance(self, ms: float) -> int:
        """
        Move the clock forward by ``ms`` and run everything that falls due.

        Work scheduled while advancing runs too if it is due inside the
        window. Returns the number of calls executed.
        """
        if ms < 0:
            raise ValueError("Cannot move the clock backwards")
        deadline = self.now + ms
        executed = 0
        while self._queue and self._queue[0].due <= deadline:
            if self._run_next():
                executed += 1
        self.now = deadline
        return executed

    def run_until_idle(self, max_steps: int = 10000) -> int:
        """Run queued calls until the queue is empty. Returns the count run."""
        executed = 0
        while self._queue:
            if executed >= max_steps:
                raise RuntimeError(f"Scheduler still busy after {max_steps} calls")
            if self._run_next():
                executed += 1
        return executed

    def _run_next(self) -> bool:
        call = heapq.heappop(self._queue)
        if call.cancelled:
            return False
        self.now = max(self.now, call.due)
        call.fn()
        return True
