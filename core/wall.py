"""Wall -- wires the switch machine to its collaborators.

Builds the module library, geometry, ticker, monitor, event bus, state
machine and playlist from a config dict (see config.py). All methods except
post_switch() and status() must run on the loop thread.
"""

import logging
import threading
from typing import Dict, Optional

from config import EVENT_POLL_MS, LEAD_TIME_MS, TICK_INTERVAL_MS, TRANSITION_WINDOW_MS
from core.event_bus import EventBus
from core.geometry import WallGeometry
from core.monitor import Monitor
from core.playlist import PlaylistDriver
from core.registry import ModuleLibrary
from core.signal import Signal
from core.state_machine import SwitchMachine
from core.ticker import ModuleTicker
from core.timers import TimerService

# Import the module package to trigger registration
import modules  # noqa: F401

logger = logging.getLogger(__name__)

SWITCH_TOPIC = "switch"


class Wall:
    """One content wall: a state machine plus everything it talks to."""

    def __init__(self, config: Dict, timers: TimerService):
        wall_cfg = config.get("wall", {})
        monitor_cfg = config.get("monitor", {})

        self.timers = timers
        self.lead_ms = wall_cfg.get("lead_time_ms", LEAD_TIME_MS)

        self.bus = EventBus(timers, wall_cfg.get("event_poll_ms", EVENT_POLL_MS))
        self.library = ModuleLibrary(timers=timers)
        self.library.load_from_config(config.get("modules", []))
        self.geometry = WallGeometry.from_config(config.get("geometry", {}))
        self.ticker = ModuleTicker(timers, wall_cfg.get("tick_interval_ms", TICK_INTERVAL_MS))
        self.monitor = Monitor(
            enabled=monitor_cfg.get("enabled", False),
            history_len=monitor_cfg.get("history_len", 200),
            clock=timers.now,
        )
        self.machine = SwitchMachine(
            self.library, self.ticker, self.geometry, timers,
            monitor=self.monitor,
            transition_window_ms=wall_cfg.get("transition_window_ms", TRANSITION_WINDOW_MS),
        )
        self.playlist = PlaylistDriver(
            self.machine, timers, self.library, config.get("playlist", []),
            lead_ms=self.lead_ms,
        )

        self._lock = threading.Lock()
        self._snapshot: Dict = {}
        self.bus.subscribe(SWITCH_TOPIC, self._on_switch_message)
        self.ticker.subscribe(lambda active: self._refresh_status())
        self._refresh_status()

    def start(self, autoplay: bool = True):
        self.bus.start()
        self.ticker.start()
        if autoplay:
            self.playlist.start()
        self._refresh_status()
        logger.info("Wall started (%d modules)", len(self.library.names()))

    def stop(self):
        self.playlist.stop()
        self.ticker.stop()
        self.bus.stop()
        logger.info("Wall stopped")

    # ------------------------------------------------------------------
    # Switching
    # ------------------------------------------------------------------

    def request_switch(self, module_name: str, delay_ms: Optional[float] = None,
                       hold_ms: Optional[float] = None) -> Signal:
        """Loop thread: show module_name after delay_ms (default lead time)."""
        if delay_ms is None:
            completion = self.playlist.play_now(module_name, hold_ms)
        else:
            deadline = self.timers.now() + delay_ms
            completion = self.machine.request_switch(module_name, deadline)
        self._refresh_status()
        return completion

    def post_switch(self, module_name: str, delay_ms: Optional[float] = None,
                    hold_ms: Optional[float] = None):
        """Any thread: queue a switch for the loop thread."""
        self.library.require(module_name)
        self.bus.publish(SWITCH_TOPIC, {
            "module": module_name, "delay_ms": delay_ms, "hold_ms": hold_ms,
        })

    def _on_switch_message(self, payload: Dict):
        self.request_switch(payload["module"], payload.get("delay_ms"), payload.get("hold_ms"))

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> Dict:
        """Thread-safe snapshot, refreshed on the loop thread."""
        with self._lock:
            return dict(self._snapshot)

    def _refresh_status(self):
        state = self.machine.state
        snapshot = {
            "time": self.timers.now(),
            "state": self.machine.state_name,
            "on_screen": self.machine.on_screen.name,
            "deadline": getattr(state, "deadline", None),
            "active": [m.name for m in self.ticker.active()],
            "playlist": self.playlist.status(),
            "geometry": self.geometry.current_geometry().as_dict(),
        }
        with self._lock:
            self._snapshot = snapshot
