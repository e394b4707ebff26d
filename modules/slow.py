"""Slow module -- takes a while to get ready.

Mimics content that has to fetch or decode assets before it can show.
Readiness resolves ready_after_ms after will_be_shown_soon() is called;
a negative value means it never becomes ready.
"""

import logging

from core.base_module import BaseModule
from core.registry import register_module
from core.signal import Signal

logger = logging.getLogger(__name__)


@register_module("slow")
class SlowModule(BaseModule):
    """Becomes ready only after a delay, driven by the wall's timers."""

    def setup(self):
        self.ready_after_ms = float(self.config.get("ready_after_ms", 3000))
        self._timer = None
        self.ready = Signal("slow.ready")

    def will_be_shown_soon(self, deadline):
        if self.ready_after_ms < 0:
            logger.debug("Slow module will never be ready")
        elif self.timers is None or self.ready_after_ms == 0:
            self.ready.resolve()
        else:
            self._timer = self.timers.call_later(self.ready_after_ms, self.ready.resolve)
        return self.ready

    def render(self):
        return self.config.get("text", "Slow and steady")

    def dispose(self):
        if self.timers is not None:
            self.timers.cancel(self._timer)
        self._timer = None
