"""A live module instance bound to the wall.

RunningModule wraps a ModuleDefinition. It can exist before its module is
instantiated: if the definition hasn't loaded yet, instantiate() defers
until it has (or forever, if the RunningModule is disposed first).

Module code is content, not infrastructure. Exceptions from module hooks
are logged here and never reach the state machine.
"""

import logging
from typing import Optional

from core.base_module import BaseModule
from core.geometry import Geometry
from core.registry import ModuleDefinition
from core.signal import Signal

logger = logging.getLogger(__name__)


class RunningModule:
    """Lifecycle wrapper around one instance of a module definition."""

    def __init__(self, definition: ModuleDefinition,
                 geometry: Optional[Geometry] = None,
                 deadline: Optional[float] = None):
        self.definition = definition
        self.geometry = geometry or Geometry()
        self.deadline = deadline
        self.instance: Optional[BaseModule] = None
        self.disposed = False
        self._instantiate_requested = False
        self._pending_show: Optional[float] = None
        self._show_signal: Optional[Signal] = None
        self._last_tick: Optional[float] = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def instantiated(self) -> bool:
        return self.instance is not None

    def instantiate(self):
        """Create the module instance, now or once the definition loads."""
        if self._instantiate_requested or self.disposed:
            return
        self._instantiate_requested = True
        self.definition.when_loaded.then(self._create)

    def _create(self):
        if self.disposed or self.instance is not None:
            return
        try:
            self.instance = self.definition.create(self.geometry, self.deadline)
        except Exception as exc:
            logger.error("Module %s failed to instantiate: %s", self.name, exc)
            return
        logger.debug("Module %s instantiated", self.name)
        if self._pending_show is not None:
            self._forward_show(self._pending_show)

    def will_be_shown_soon(self, deadline: float) -> Signal:
        """Returns a signal that resolves when the module is ready to show."""
        if self._show_signal is None or not self._show_signal.pending:
            self._show_signal = Signal(f"{self.name}.ready")
        if self.disposed:
            return self._show_signal
        if self.instance is None:
            self._pending_show = deadline
        else:
            self._forward_show(deadline)
        return self._show_signal

    def _forward_show(self, deadline):
        self._pending_show = None
        signal = self._show_signal
        try:
            ready = self.instance.will_be_shown_soon(deadline)
        except Exception as exc:
            # Leave the signal pending; the preparation timeout takes over.
            logger.error("Module %s willBeShownSoon error: %s", self.name, exc)
            return
        if ready is None:
            signal.resolve()
        else:
            ready.then(signal.resolve)

    def will_be_hidden_soon(self, deadline: float):
        self._pending_show = None
        self._call("will_be_hidden_soon", deadline)

    def tick(self, now: float):
        delta = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now
        self._call("tick", now, delta)

    def render(self) -> str:
        if self.instance is None or self.disposed:
            return ""
        try:
            return self.instance.render()
        except Exception as exc:
            logger.error("Module %s render error: %s", self.name, exc)
            return ""

    def dispose(self):
        """Release the instance. Safe to call more than once."""
        if self.disposed:
            return
        self.disposed = True
        self._pending_show = None
        self.definition.when_loaded.remove(self._create)
        if self.instance is not None:
            try:
                self.instance.dispose()
            except Exception as exc:
                logger.error("Module %s dispose error: %s", self.name, exc)
        logger.debug("Module %s disposed", self.name)

    def _call(self, hook, *args):
        if self.instance is None or self.disposed:
            return
        try:
            getattr(self.instance, hook)(*args)
        except Exception as exc:
            logger.error("Module %s %s error: %s", self.name, hook, exc)

    def __repr__(self):
        state = "disposed" if self.disposed else "live" if self.instance else "pending"
        return f"<RunningModule {self.name} {state}>"
