"""Message module -- static text, e.g. announcements."""

from core.base_module import BaseModule
from core.registry import register_module


@register_module("message")
class MessageModule(BaseModule):

    def setup(self):
        self.text = self.config.get("text", "")

    def render(self):
        return self.text
