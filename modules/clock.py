"""Clock module -- displays the current time and date.

Needs nothing from outside; it refreshes its text on every tick.
"""

from datetime import datetime

from core.base_module import BaseModule
from core.registry import register_module


@register_module("clock")
class ClockModule(BaseModule):
    """Large clock with date."""

    def setup(self):
        self._fmt = self.config.get("format", "%H:%M:%S")
        self._text = ""

    def tick(self, now, delta):
        stamp = datetime.fromtimestamp(now / 1000.0)
        self._text = f"{stamp.strftime(self._fmt)}\n{stamp.strftime('%A, %B %d')}"

    def render(self):
        return self._text
