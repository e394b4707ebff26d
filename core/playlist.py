"""Playlist driver -- cycles the wall through configured modules.

Each entry shows for duration_ms. The switch for the next entry is
requested lead_ms before its deadline so the module has time to prepare.
play_now() interrupts the rotation with an ad-hoc module and resumes the
rotation after it has been held on screen.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from config import LEAD_TIME_MS
from core.registry import ModuleLibrary
from core.signal import Signal
from core.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)

DEFAULT_HOLD_MS = 30000


@dataclass(frozen=True)
class PlaylistEntry:
    module: str
    duration_ms: float


class PlaylistDriver:
    """Schedules switch requests on a SwitchMachine, round-robin."""

    def __init__(self, machine, timers: TimerService, library: ModuleLibrary,
                 entries: List[Dict], lead_ms: float = LEAD_TIME_MS,
                 hold_ms: float = DEFAULT_HOLD_MS):
        self._machine = machine
        self._timers = timers
        self.lead_ms = lead_ms
        self.hold_ms = hold_ms
        self.entries: List[PlaylistEntry] = []
        for raw in entries or []:
            entry = PlaylistEntry(raw["module"], float(raw.get("duration_ms", hold_ms)))
            library.require(entry.module)
            if entry.duration_ms <= 0:
                raise ValueError(f"Playlist entry {entry.module} needs a positive duration")
            self.entries.append(entry)

        self._index = -1
        self._timer: Optional[TimerHandle] = None
        self.current: Optional[str] = None
        self.deadline: Optional[float] = None
        self.running = False

    def start(self):
        if self.running:
            return
        if not self.entries:
            logger.warning("Playlist is empty; nothing to play")
            return
        self.running = True
        logger.info("Playlist started (%d entries)", len(self.entries))
        self._advance(self._timers.now() + self.lead_ms)

    def stop(self):
        self.running = False
        self._timers.cancel(self._timer)
        self._timer = None

    def play_now(self, module_name: str, hold_ms: Optional[float] = None) -> Signal:
        """Interrupt the rotation. Resumes with the next entry after hold_ms."""
        deadline = self._timers.now() + self.lead_ms
        completion = self._machine.request_switch(module_name, deadline)
        self._timers.cancel(self._timer)
        self._timer = None
        self.current = module_name
        self.deadline = deadline
        logger.info("Playlist interrupted by %s", module_name)

        if self.running:
            hold = self.hold_ms if hold_ms is None else hold_ms
            self._schedule(deadline + hold)
        return completion

    def status(self) -> Dict:
        nxt = self.entries[(self._index + 1) % len(self.entries)].module if self.entries else None
        return {
            "running": self.running,
            "current": self.current,
            "deadline": self.deadline,
            "next": nxt,
        }

    def _schedule(self, next_deadline: float):
        self._timer = self._timers.call_at(
            next_deadline - self.lead_ms, lambda: self._advance(next_deadline))

    def _advance(self, deadline: float):
        self._timer = None
        if not self.running:
            return
        self._index = (self._index + 1) % len(self.entries)
        entry = self.entries[self._index]
        self.current = entry.module
        self.deadline = deadline
        logger.debug("Playlist -> %s at %.0f", entry.module, deadline)
        self._machine.request_switch(entry.module, deadline)
        self._schedule(deadline + entry.duration_ms)
