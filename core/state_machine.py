"""Module-swap state machine for the wall.

Exactly one module is on screen at a time. A switch request names the next
module and the deadline at which it should start to appear; the machine
walks through

    Idle -> Preparing -> Transitioning -> Displaying -> Preparing -> ...

Preparing     waits for the module definition to load, instantiates it,
              warns the old module it will be hidden and the new one it
              will be shown, and waits for the new one to say it's ready
              (or for the deadline, whichever comes first).
Transitioning at the deadline the new module starts ticking alongside the
              old one; after the transition window the old one is retired.
Displaying    resolves the caller's completion handle.

A request arriving mid-swap wins. The in-flight module is told it will be
hidden and is thrown away, the superseded completion handle is discarded
(never resolved, never failed) and preparation starts over against the
module that is really on screen.

States are plain dataclasses; the machine dispatches enter/exit/switch
through tables keyed by state type. Each timed state owns one TimerScope,
released on exit. Callbacks belonging to a state that is no longer current
are ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Type

from config import TRANSITION_WINDOW_MS
from core.geometry import WallGeometry
from core.monitor import Monitor
from core.registry import EMPTY_MODULE, ModuleDefinition, ModuleLibrary
from core.running_module import RunningModule
from core.signal import Signal
from core.ticker import ModuleTicker
from core.timers import TimerScope, TimerService

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Idle:
    # Placeholder standing in for "nothing on screen".
    module: RunningModule


@dataclass(eq=False)
class Preparing:
    old_module: RunningModule
    definition: ModuleDefinition
    deadline: float
    completion: Signal
    module: Optional[RunningModule] = None
    timer: Optional[TimerScope] = field(default=None, repr=False)
    on_loaded: Optional[Callable[[], None]] = field(default=None, repr=False)

    def __post_init__(self):
        if self.old_module is None:
            raise ValueError("old_module must be defined!")


@dataclass(eq=False)
class Transitioning:
    old_module: RunningModule
    new_module: RunningModule
    deadline: float
    completion: Signal
    timer: Optional[TimerScope] = field(default=None, repr=False)


@dataclass(eq=False)
class Displaying:
    module: RunningModule
    completion: Signal


class SwitchMachine:
    """Coordinates module swaps on the wall. Loop-thread only."""

    def __init__(self, library: ModuleLibrary, ticker: ModuleTicker,
                 geometry: WallGeometry, timers: TimerService,
                 monitor: Optional[Monitor] = None, log: Optional[logging.Logger] = None,
                 transition_window_ms: float = TRANSITION_WINDOW_MS):
        self._library = library
        self._ticker = ticker
        self._geometry = geometry
        self._timers = timers
        self._monitor = monitor or Monitor(enabled=False)
        self._log = log or logger
        self.transition_window_ms = transition_window_ms

        self._enter: Dict[Type, Callable] = {
            Idle: self._enter_idle,
            Preparing: self._enter_preparing,
            Transitioning: self._enter_transitioning,
            Displaying: self._enter_displaying,
        }
        self._exit: Dict[Type, Callable] = {
            Preparing: self._exit_preparing,
            Transitioning: self._release_timer,
        }
        self._switch: Dict[Type, Callable] = {
            Idle: self._switch_idle,
            Preparing: self._switch_preparing,
            Transitioning: self._switch_transitioning,
            Displaying: self._switch_displaying,
        }

        self._state = Idle(RunningModule(library.require(EMPTY_MODULE)))
        self._observe(self._state)
        self._enter[Idle](self._state)

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def state(self):
        return self._state

    @property
    def state_name(self) -> str:
        return type(self._state).__name__

    @property
    def on_screen(self) -> RunningModule:
        """The module actually visible (the old one, until a swap completes)."""
        state = self._state
        if isinstance(state, (Idle, Displaying)):
            return state.module
        return state.old_module

    def request_switch(self, module_name: str, deadline: float) -> Signal:
        """Ask for module_name to start showing at deadline.

        Returns a completion handle resolved once the module is the one on
        display. If a newer request arrives first, the handle is discarded.
        Raises ModuleNotRegisteredError for unknown names.
        """
        if self._monitor.is_enabled():
            self._monitor.update({
                "time": self._timers.now(),
                "event": f"request_switch: {module_name}",
                "deadline": deadline,
            })
        completion = Signal(f"switch:{module_name}")
        self._switch[type(self._state)](self._state, module_name, deadline, completion)
        return completion

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    def _transition(self, next_state):
        current = self._state
        exit_fn = self._exit.get(type(current))
        if exit_fn:
            exit_fn(current)
        self._state = next_state
        self._log.debug("%s -> %s", type(current).__name__, type(next_state).__name__)
        self._observe(next_state)
        self._enter[type(next_state)](next_state)

    def _is_current(self, state) -> bool:
        return state is self._state

    def _observe(self, state):
        if not self._monitor.is_enabled():
            return
        observation = {"time": self._timers.now(), "state": type(state).__name__}
        deadline = getattr(state, "deadline", None)
        if deadline is not None:
            observation["deadline"] = deadline
        self._monitor.update(observation)

    def _release_timer(self, state):
        if state.timer is not None:
            state.timer.release()

    def _preparing(self, old_module, module_name, deadline, completion) -> Preparing:
        return Preparing(old_module, self._library.require(module_name), deadline, completion)

    # ------------------------------------------------------------------
    # Idle
    # ------------------------------------------------------------------

    def _enter_idle(self, state: Idle):
        pass

    def _switch_idle(self, state: Idle, module_name, deadline, completion):
        self._transition(self._preparing(state.module, module_name, deadline, completion))

    # ------------------------------------------------------------------
    # Preparing
    # ------------------------------------------------------------------

    def _enter_preparing(self, state: Preparing):
        state.timer = TimerScope(self._timers)
        state.timer.arm(state.deadline, lambda: self._preparation_timeout(state))
        # Don't begin preparing the module until its definition has loaded.
        state.on_loaded = lambda: self._definition_loaded(state)
        state.definition.when_loaded.then(state.on_loaded)

    def _exit_preparing(self, state: Preparing):
        self._release_timer(state)
        if state.on_loaded is not None:
            state.definition.when_loaded.remove(state.on_loaded)

    def _start_module(self, state: Preparing) -> Signal:
        state.module = RunningModule(
            state.definition, self._geometry.current_geometry(), state.deadline)
        state.module.instantiate()
        state.old_module.will_be_hidden_soon(state.deadline)
        return state.module.will_be_shown_soon(state.deadline)

    def _definition_loaded(self, state: Preparing):
        if not self._is_current(state) or state.module is not None:
            return
        ready = self._start_module(state)
        ready.then(lambda: self._module_ready(state))

    def _module_ready(self, state: Preparing):
        if not self._is_current(state):
            return
        self._transition(Transitioning(
            state.old_module, state.module, state.deadline, state.completion))

    def _preparation_timeout(self, state: Preparing):
        if not self._is_current(state):
            return
        self._log.error("Preparation timeout for module %s", state.definition.name)
        if state.module is None:
            # Still waiting on the definition; carry a module that will
            # instantiate itself once it loads.
            self._start_module(state)
        self._transition(Transitioning(
            state.old_module, state.module, state.deadline, state.completion))

    def _switch_preparing(self, state: Preparing, module_name, deadline, completion):
        next_state = self._preparing(state.old_module, module_name, deadline, completion)
        if state.module is not None:
            # The module was told it would be shown; meet its contract by
            # telling it it's hidden at the old deadline, then drop it.
            state.module.will_be_hidden_soon(state.deadline)
            state.module.dispose()
        state.completion.discard()
        self._transition(next_state)

    # ------------------------------------------------------------------
    # Transitioning
    # ------------------------------------------------------------------

    def _enter_transitioning(self, state: Transitioning):
        end = state.deadline + self.transition_window_ms
        state.timer = TimerScope(self._timers)
        state.timer.arm(state.deadline, lambda: self._begin_overlap(state, end))

    def _begin_overlap(self, state: Transitioning, end: float):
        if not self._is_current(state):
            return
        self._ticker.add(state.new_module)
        state.timer.arm(end, lambda: self._finish_transition(state))

    def _finish_transition(self, state: Transitioning):
        if not self._is_current(state):
            return
        self._ticker.remove(state.old_module)
        self._transition(Displaying(state.new_module, state.completion))

    def _switch_transitioning(self, state: Transitioning, module_name, deadline, completion):
        # Mid-swap from O to N, asked for M: clean up N and prepare O -> M.
        # O is not told about the new deadline here.
        next_state = self._preparing(state.old_module, module_name, deadline, completion)
        state.new_module.will_be_hidden_soon(deadline)
        self._ticker.remove(state.new_module)
        state.completion.discard()
        self._transition(next_state)

    # ------------------------------------------------------------------
    # Displaying
    # ------------------------------------------------------------------

    def _enter_displaying(self, state: Displaying):
        self._log.info("Displaying %s", state.module.name)
        state.completion.resolve()

    def _switch_displaying(self, state: Displaying, module_name, deadline, completion):
        self._transition(self._preparing(state.module, module_name, deadline, completion))
