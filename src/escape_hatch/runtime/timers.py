"""Single-shot timer facilities the repeat counter schedules resets on."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Hashable, Optional, Protocol

TimerCallback = Callable[[], None]


class TimerFacility(Protocol):
    """Host loop timer: one deferred callback per ``start`` call."""

    def start(self, duration_ms: int, callback: TimerCallback) -> Hashable:
        ...

    def stop(self, handle: Hashable) -> None:
        ...


class AsyncioTimerFacility:
    """Timers backed by ``loop.call_later`` on a running asyncio loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def start(self, duration_ms: int, callback: TimerCallback) -> asyncio.TimerHandle:
        return self.loop.call_later(duration_ms / 1000.0, callback)

    def stop(self, handle: Hashable) -> None:
        if isinstance(handle, asyncio.TimerHandle):
            handle.cancel()


@dataclass(order=True)
class _Scheduled:
    deadline: int
    seq: int
    callback: TimerCallback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ManualTimerFacility:
    """Deterministic virtual clock; callbacks fire only from ``advance``.

    Timers due at the same instant fire in the order they were started.
    """

    def __init__(self, *, now_ms: int = 0) -> None:
        self.now_ms = now_ms
        self._queue: list[_Scheduled] = []
        self._live: dict[int, _Scheduled] = {}
        self._seq = itertools.count(1)
        self.fired = 0

    def start(self, duration_ms: int, callback: TimerCallback) -> int:
        entry = _Scheduled(self.now_ms + max(duration_ms, 0), next(self._seq), callback)
        heapq.heappush(self._queue, entry)
        self._live[entry.seq] = entry
        return entry.seq

    def stop(self, handle: Hashable) -> None:
        entry = self._live.pop(handle, None)  # type: ignore[call-overload]
        if entry is not None:
            entry.cancelled = True

    @property
    def pending(self) -> int:
        return len(self._live)

    def advance(self, duration_ms: int) -> int:
        """Move the clock forward, firing every timer that comes due.

        Returns the number of callbacks that ran.
        """

        target = self.now_ms + duration_ms
        ran = 0
        while self._queue and self._queue[0].deadline <= target:
            entry = heapq.heappop(self._queue)
            if entry.cancelled:
                continue
            self._live.pop(entry.seq, None)
            self.now_ms = entry.deadline
            entry.callback()
            ran += 1
            self.fired += 1
        self.now_ms = target
        return ran

    def advance_to(self, when_ms: int) -> int:
        return self.advance(max(when_ms - self.now_ms, 0))


__all__ = [
    "TimerCallback",
    "TimerFacility",
    "AsyncioTimerFacility",
    "ManualTimerFacility",
]
