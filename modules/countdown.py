"""Countdown module -- counts down from its own deadline.

The countdown starts when the module starts showing (its deadline) and
runs for config["seconds"].
"""

import math

from core.base_module import BaseModule
from core.registry import register_module


@register_module("countdown")
class CountdownModule(BaseModule):

    def setup(self):
        self.seconds = float(self.config.get("seconds", 30))
        self.remaining = self.seconds

    def will_be_shown_soon(self, deadline):
        self.deadline = deadline
        self.remaining = self.seconds
        return None

    def tick(self, now, delta):
        if self.deadline is None:
            return
        elapsed = max(0.0, now - self.deadline) / 1000.0
        self.remaining = max(0.0, self.seconds - elapsed)

    def render(self):
        if self.remaining <= 0:
            return self.config.get("done_text", "Time!")
        return f"{math.ceil(self.remaining):d}"
