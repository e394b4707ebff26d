"""
Shared pytest fixtures for wall tests.

Everything runs on a ManualTimerService, so tests move time by hand and
nothing sleeps.
"""
import pytest

from core.base_module import BaseModule
from core.geometry import WallGeometry
from core.monitor import Monitor
from core.registry import ModuleDefinition, ModuleLibrary
from core.signal import Signal
from core.state_machine import SwitchMachine
from core.ticker import ModuleTicker
from core.timers import ManualTimerService


class RecordingModule(BaseModule):
    """Module that writes its lifecycle calls to a shared event list."""

    def setup(self):
        self.label = self.config["label"]
        self.events = self.config["events"]
        self.ready = Signal(f"{self.label}.ready") if self.config.get("manual_ready") else None
        self.ticks = 0
        self.config["instances"].append(self)

    def will_be_shown_soon(self, deadline):
        self.events.append((self.label, "shown_soon", deadline))
        return self.ready

    def will_be_hidden_soon(self, deadline):
        self.events.append((self.label, "hidden_soon", deadline))

    def tick(self, now, delta):
        self.ticks += 1

    def render(self):
        return self.label

    def dispose(self):
        self.events.append((self.label, "dispose", None))


class Harness:
    """A switch machine wired to fake collaborators."""

    def __init__(self, monitor_enabled=True):
        self.timers = ManualTimerService(start=0)
        self.events = []
        self.instances = {}
        self.library = ModuleLibrary(timers=self.timers)
        self.ticker = ModuleTicker(self.timers)
        self.geometry = WallGeometry()
        self.monitor = Monitor(enabled=monitor_enabled, clock=self.timers.now)
        self._machine = None

    def define(self, name, loaded=True, manual_ready=False):
        config = {
            "label": name,
            "events": self.events,
            "instances": self.instances.setdefault(name, []),
            "manual_ready": manual_ready,
        }
        definition = ModuleDefinition(name, RecordingModule, config, timers=self.timers)
        if loaded:
            definition.mark_loaded()
        return self.library.register(definition)

    @property
    def machine(self) -> SwitchMachine:
        if self._machine is None:
            self._machine = SwitchMachine(
                self.library, self.ticker, self.geometry, self.timers,
                monitor=self.monitor, transition_window_ms=5000,
            )
        return self._machine

    def events_for(self, name, kind=None):
        return [e for e in self.events if e[0] == name and (kind is None or e[1] == kind)]

    def active_names(self):
        return [m.name for m in self.ticker.active()]


@pytest.fixture
def harness():
    return Harness()


@pytest.fixture
def timers():
    return ManualTimerService(start=0)
