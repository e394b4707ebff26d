"""Deadline timers for the wall.

Everything in the wall runs on one loop thread. A TimerService schedules
callbacks at absolute deadlines (milliseconds since the epoch) and can
cancel them before they fire. Three flavours:

    ManualTimerService -- fake clock, advanced by hand (tests, simulation)
    LoopTimerService   -- real clock, blocking run_forever() loop (headless)
    TkTimerService     -- rides on root.after() (GUI mode)

A timer whose deadline has already passed fires on the next loop turn,
never synchronously inside call_at().
"""

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def now_ms() -> float:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time() * 1000.0


class TimerHandle:
    """Opaque handle returned by call_at(). Cancel it through the service."""

    __slots__ = ("deadline", "callback", "seq", "cancelled", "fired", "native")

    def __init__(self, deadline: float, callback: Callable[[], None], seq: int):
        self.deadline = deadline
        self.callback = callback
        self.seq = seq
        self.cancelled = False
        self.fired = False
        self.native = None  # backend-specific id (e.g. a Tk "after" id)

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def __lt__(self, other):
        return (self.deadline, self.seq) < (other.deadline, other.seq)

    def __repr__(self):
        state = "cancelled" if self.cancelled else "fired" if self.fired else "armed"
        return f"<TimerHandle @{self.deadline:.0f} {state}>"


class TimerService(ABC):
    """Schedules callbacks at absolute deadlines."""

    def __init__(self):
        self._seq = itertools.count()

    @abstractmethod
    def now(self) -> float:
        ...

    @abstractmethod
    def call_at(self, deadline: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return self.call_at(self.now() + delay_ms, callback)

    def until(self, deadline: float) -> float:
        """Milliseconds from now until deadline (never negative)."""
        return max(0.0, deadline - self.now())

    def cancel(self, handle: Optional[TimerHandle]):
        """Cancel a timer. Safe on None, fired or already-cancelled handles."""
        if handle is None or not handle.active:
            return
        handle.cancelled = True
        self._cancel_native(handle)

    def _cancel_native(self, handle: TimerHandle):
        pass

    def _new_handle(self, deadline, callback) -> TimerHandle:
        return TimerHandle(deadline, callback, next(self._seq))

    @staticmethod
    def _fire(handle: TimerHandle):
        if not handle.active:
            return
        handle.fired = True
        try:
            handle.callback()
        except Exception:
            logger.exception("Timer callback failed")


class ManualTimerService(TimerService):
    """Heap-backed timers on a clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        super().__init__()
        self._now = float(start)
        self._heap: List[TimerHandle] = []

    def now(self) -> float:
        return self._now

    def call_at(self, deadline, callback):
        handle = self._new_handle(float(deadline), callback)
        heapq.heappush(self._heap, handle)
        return handle

    def pending(self) -> int:
        return sum(1 for h in self._heap if h.active)

    def next_deadline(self) -> Optional[float]:
        self._drop_dead()
        return self._heap[0].deadline if self._heap else None

    def run_due(self) -> int:
        """Fire every timer due at the current time. Returns how many fired."""
        return self.advance_to(self._now)

    def advance(self, ms: float) -> int:
        return self.advance_to(self._now + ms)

    def advance_to(self, target: float) -> int:
        """Move the clock to target, firing due timers in deadline order.

        Timers armed by a callback are honoured in the same call if they are
        due before target.
        """
        fired = 0
        while True:
            self._drop_dead()
            if not self._heap or self._heap[0].deadline > target:
                break
            handle = heapq.heappop(self._heap)
            self._now = max(self._now, handle.deadline)
            self._fire(handle)
            fired += 1
        self._now = max(self._now, float(target))
        return fired

    def _drop_dead(self):
        while self._heap and not self._heap[0].active:
            heapq.heappop(self._heap)


class LoopTimerService(ManualTimerService):
    """Real-clock timers with a blocking loop for headless mode."""

    def __init__(self, clock: Callable[[], float] = now_ms, idle_ms: float = 50.0):
        super().__init__(start=clock())
        self._clock = clock
        self._idle_ms = idle_ms
        self._wake = threading.Event()
        self._running = False

    def now(self) -> float:
        return self._clock()

    def run_forever(self):
        """Fire timers as they come due until stop() is called."""
        self._running = True
        self._wake.clear()
        logger.info("Timer loop started")
        while self._running:
            self.advance_to(self._clock())
            nxt = self.next_deadline()
            wait_ms = self._idle_ms if nxt is None else min(self._idle_ms, self.until(nxt))
            self._wake.wait(wait_ms / 1000.0)
            self._wake.clear()
        logger.info("Timer loop stopped")

    @property
    def running(self) -> bool:
        return self._running

    def stop(self):
        """Stop the loop. Safe to call from any thread."""
        self._running = False
        self._wake.set()


class TkTimerService(TimerService):
    """Timers driven by a tkinter root's after() queue."""

    def __init__(self, root, clock: Callable[[], float] = now_ms):
        super().__init__()
        self._root = root
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def call_at(self, deadline, callback):
        handle = self._new_handle(float(deadline), callback)
        delay = int(round(self.until(handle.deadline)))
        handle.native = self._root.after(delay, lambda: self._fire(handle))
        return handle

    def _cancel_native(self, handle):
        if handle.native is not None:
            self._root.after_cancel(handle.native)


class TimerScope:
    """Owns the one outstanding timer of a state.

    Arming replaces (and cancels) the previous timer; release() cancels
    whatever is outstanding. States release their scope on exit, whichever
    way they leave.
    """

    def __init__(self, timers: TimerService):
        self._timers = timers
        self._handle: Optional[TimerHandle] = None

    @property
    def armed(self) -> bool:
        return self._handle is not None and self._handle.active

    def arm(self, deadline: float, callback: Callable[[], None]) -> TimerHandle:
        self.release()
        self._handle = self._timers.call_at(deadline, callback)
        return self._handle

    def release(self):
        self._timers.cancel(self._handle)
        self._handle = None
