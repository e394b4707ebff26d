"""Base class for display modules.

A module is a unit of content on the wall. The runtime calls its hooks
in this order:

    will_be_shown_soon(deadline)   -- may return a Signal; the swap waits on it
    tick(now, delta)               -- repeatedly, while the module is active
    will_be_hidden_soon(deadline)  -- a swap away from this module is coming
    dispose()                      -- release everything

A module can be told it will be hidden without ever being shown (a newer
switch request won) and must cope with that.
"""

from abc import ABC
from typing import Dict, Optional

from core.geometry import Geometry
from core.signal import Signal


class BaseModule(ABC):
    """Display module. Subclasses override the hooks they care about."""

    def __init__(self, config: Dict, geometry: Geometry, deadline: Optional[float],
                 timers=None):
        self.config = config
        self.geometry = geometry
        self.deadline = deadline
        # The wall's TimerService, for modules that schedule their own work.
        self.timers = timers
        self.setup()

    def setup(self):
        """Build module state. Runs once at instantiation."""

    def will_be_shown_soon(self, deadline: float) -> Optional[Signal]:
        """Prepare to be shown at deadline. Return a Signal to delay readiness."""
        return None

    def will_be_hidden_soon(self, deadline: float):
        pass

    def tick(self, now: float, delta: float):
        pass

    def render(self) -> str:
        """Text shown for this module by the wall view."""
        return ""

    def dispose(self):
        pass


class EmptyModule(BaseModule):
    """Stands in for "nothing on screen"."""
