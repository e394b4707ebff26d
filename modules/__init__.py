"""Display module implementations for the wall.

Importing this package registers all built-in module types.
"""

from modules.clock import ClockModule
from modules.message import MessageModule
from modules.countdown import CountdownModule
from modules.slow import SlowModule

__all__ = ["ClockModule", "MessageModule", "CountdownModule", "SlowModule"]
