from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class ScheduledCall(Protocol):
    def cancel(self) -> None:  # pragma: no cover
        ...

    def cancelled(self) -> bool:  # pragma: no cover
        ...


class Scheduler(Protocol):
    """Runs a callback once after a delay.

    Contract:
      - `call_later(delay_s, callback)` returns a handle; `handle.cancel()` prevents
        a callback that has not run yet.
      - callbacks run on the same thread as the caller (no locking needed).
    """

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledCall:  # pragma: no cover
        ...


class AsyncioScheduler:
    """Scheduler backed by the running event loop (used by the API server)."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise RuntimeError("AsyncioScheduler needs a running event loop; use ManualScheduler outside one") from e
        return loop.call_later(max(delay_s, 0.0), callback)


@dataclass(slots=True)
class ManualCall:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    _cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def __lt__(self, other: "ManualCall") -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class ManualScheduler:
    """Deterministic scheduler driven by a virtual clock.

    Nothing runs until `advance()` is called; due callbacks then run in due order
    (ties in scheduling order). Used by tests and offline simulations.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[ManualCall] = []
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ManualCall:
        call = ManualCall(due=self.now + max(delay_s, 0.0), seq=next(self._seq), callback=callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for c in self._queue if not c.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run everything that became due.

        Returns the number of callbacks that ran.
        """

        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled():
                continue
            self.now = call.due
            call.callback()
            ran += 1
        self.now = target
        return ran

    def run_all(self) -> int:
        ran = 0
        while self._queue:
            call = heapq.heappop(self._queue)
            if call.cancelled():
                continue
            self.now = max(self.now, call.due)
            call.callback()
            ran += 1
        return ran
