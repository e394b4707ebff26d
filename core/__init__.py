"""Core framework for the content wall.

Coordinates which display module is on the wall, swapping modules at
precise deadlines.

Architecture:
    SwitchMachine  -- Idle/Preparing/Transitioning/Displaying swap lifecycle
    Signal         -- one-shot readiness signals and completion handles
    TimerService   -- deadline timers (manual, headless loop, or tkinter)
    ModuleLibrary  -- resolves module names to loadable definitions
    RunningModule  -- lifecycle wrapper around one module instance
    ModuleTicker   -- ticks the modules currently on the wall
    EventBus       -- thread-safe bus; delivers on the loop thread
    Monitor        -- optional observation sink
    PlaylistDriver -- cycles the wall through configured modules
"""

from core.errors import ModuleNotRegisteredError, WallError
from core.event_bus import EventBus
from core.geometry import Geometry, WallGeometry
from core.monitor import Monitor
from core.playlist import PlaylistDriver
from core.registry import MODULE_REGISTRY, ModuleDefinition, ModuleLibrary, register_module
from core.running_module import RunningModule
from core.signal import Signal
from core.state_machine import SwitchMachine
from core.ticker import ModuleTicker
from core.timers import LoopTimerService, ManualTimerService, TimerService, TkTimerService

__all__ = [
    "ModuleNotRegisteredError",
    "WallError",
    "EventBus",
    "Geometry",
    "WallGeometry",
    "Monitor",
    "PlaylistDriver",
    "MODULE_REGISTRY",
    "ModuleDefinition",
    "ModuleLibrary",
    "register_module",
    "RunningModule",
    "Signal",
    "SwitchMachine",
    "ModuleTicker",
    "LoopTimerService",
    "ManualTimerService",
    "TimerService",
    "TkTimerService",
]
