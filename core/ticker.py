"""Active module ticker.

Holds the set of modules currently rendering on the wall and ticks them
on a fixed interval. During a transition two modules are active at once.

add() and remove() are both safe to call redundantly: after a preempted
swap the caller can't always know whether a module made it in.
"""

import logging
from typing import Callable, List, Optional

from core.running_module import RunningModule
from core.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)


class ModuleTicker:
    """Ticks active modules and notifies views when membership changes."""

    def __init__(self, timers: TimerService, interval_ms: float = 1000.0):
        self._timers = timers
        self.interval_ms = interval_ms
        self._active: List[RunningModule] = []
        self._listeners: List[Callable[[List[RunningModule]], None]] = []
        self._timer: Optional[TimerHandle] = None

    def add(self, module: RunningModule):
        if module is None or module in self._active:
            return
        self._active.append(module)
        logger.info("Ticker: + %s (%d active)", module.name, len(self._active))
        module.tick(self._timers.now())
        self._notify()

    def remove(self, module: RunningModule):
        """Retire a module: drop it from the active set and dispose of it."""
        if module is None:
            return
        if module in self._active:
            self._active.remove(module)
            logger.info("Ticker: - %s (%d active)", module.name, len(self._active))
            self._notify()
        module.dispose()

    def active(self) -> List[RunningModule]:
        return list(self._active)

    def __contains__(self, module):
        return module in self._active

    def subscribe(self, callback: Callable[[List[RunningModule]], None]):
        """Register a callback receiving the active list after every change/tick."""
        self._listeners.append(callback)

    def tick(self):
        now = self._timers.now()
        for module in list(self._active):
            module.tick(now)
        self._notify()

    def start(self):
        if self._timer is not None and self._timer.active:
            return
        self._schedule()
        logger.info("Ticker started (%.0fms interval)", self.interval_ms)

    def stop(self):
        self._timers.cancel(self._timer)
        self._timer = None

    def _schedule(self):
        self._timer = self._timers.call_later(self.interval_ms, self._on_timer)

    def _on_timer(self):
        self.tick()
        self._schedule()

    def _notify(self):
        active = self.active()
        for cb in self._listeners:
            try:
                cb(active)
            except Exception as exc:
                logger.error("Ticker listener error: %s", exc)
