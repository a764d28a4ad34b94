"""Scheduler — отложенные отменяемые callback'и для debounce.

Абстракция: schedule(delay_ms, callback) -> handle с методом cancel().
- AsyncioScheduler: loop.call_later на кооперативном event loop
- ManualScheduler: виртуальные часы, время двигается вручную (advance)
"""

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Cancellable:
        ...


class AsyncioScheduler:
    """Scheduler поверх asyncio event loop.

    Callback выполняется в том же потоке событий, что и пользовательские
    события, поэтому срабатывание таймера — просто ещё одно событие в очереди.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)


@dataclass(order=True)
class ManualTimer:
    """Таймер ManualScheduler."""

    due_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Детерминированный scheduler с виртуальным временем.

    Таймеры срабатывают только при advance(), строго в порядке
    (due_ms, порядок постановки).
    """

    def __init__(self, now_ms: float = 0.0):
        self.now_ms = now_ms
        self._timers: List[ManualTimer] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(due_ms=self.now_ms + delay_ms, seq=next(self._seq), callback=callback)
        heapq.heappush(self._timers, timer)
        return timer

    @property
    def pending_count(self) -> int:
        """Количество неотменённых таймеров."""
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, delay_ms: float) -> int:
        """
        Сдвиг виртуального времени с выполнением наступивших таймеров.

        Returns:
            Количество выполненных callback'ов
        """
        target_ms = self.now_ms + delay_ms
        fired = 0
        while self._timers and self._timers[0].due_ms <= target_ms:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self.now_ms = timer.due_ms
            timer.callback()
            fired += 1
        self.now_ms = target_ms
        return fired
