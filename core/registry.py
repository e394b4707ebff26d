"""Module registry and library for the wall.

Module *types* are registered by name with a decorator. The wall loads
configuration (YAML or dict) and builds a library of named module
definitions, each pointing at a registered type plus its own config.

Usage:
    @register_module("clock")
    class ClockModule(BaseModule):
        ...

    library = ModuleLibrary()
    library.load_from_config([{"name": "lobby-clock", "type": "clock"}])
    library.resolve("lobby-clock")
"""

import logging
from typing import Dict, List, Optional, Type

from core.base_module import BaseModule, EmptyModule
from core.errors import ModuleNotRegisteredError
from core.signal import Signal

logger = logging.getLogger(__name__)

MODULE_REGISTRY: Dict[str, Type[BaseModule]] = {}

EMPTY_MODULE = "_empty"


def register_module(name):
    """Decorator to register a module class by type name."""
    def decorator(cls):
        MODULE_REGISTRY[name] = cls
        logger.debug("Registered module type: %s -> %s", name, cls.__name__)
        return cls
    return decorator


class ModuleDefinition:
    """A named, loadable module: a module class plus its config."""

    def __init__(self, name: str, module_cls: Type[BaseModule],
                 config: Optional[Dict] = None, title: Optional[str] = None,
                 timers=None):
        self.name = name
        self.timers = timers
        self.module_cls = module_cls
        self.config = dict(config or {})
        self.title = title or self.config.get("title", name)
        # Resolves once the definition is safe to instantiate.
        self.when_loaded = Signal(f"{name}.loaded")

    @property
    def loaded(self) -> bool:
        return self.when_loaded.resolved

    def mark_loaded(self):
        if self.when_loaded.resolve():
            logger.info("Module %s loaded", self.name)

    def create(self, geometry, deadline) -> BaseModule:
        return self.module_cls(dict(self.config), geometry, deadline, timers=self.timers)

    def __repr__(self):
        return f"<ModuleDefinition {self.name} ({self.module_cls.__name__})>"


class ModuleLibrary:
    """Named module definitions available to the wall."""

    def __init__(self, timers=None):
        self.timers = timers
        self._modules: Dict[str, ModuleDefinition] = {}
        empty = ModuleDefinition(EMPTY_MODULE, EmptyModule, title="(empty)")
        empty.mark_loaded()
        self.register(empty)

    def register(self, definition: ModuleDefinition) -> ModuleDefinition:
        if definition.name in self._modules:
            logger.warning("Replacing module definition %s", definition.name)
        self._modules[definition.name] = definition
        return definition

    def resolve(self, name: str) -> Optional[ModuleDefinition]:
        return self._modules.get(name)

    def require(self, name: str) -> ModuleDefinition:
        definition = self._modules.get(name)
        if definition is None:
            raise ModuleNotRegisteredError(name)
        return definition

    def mark_loaded(self, name: str):
        self.require(name).mark_loaded()

    def names(self, include_hidden: bool = False) -> List[str]:
        return [n for n in self._modules if include_hidden or not n.startswith("_")]

    def __contains__(self, name):
        return name in self._modules

    def __len__(self):
        return len(self._modules)

    def load_from_config(self, entries: List[Dict]) -> int:
        """Build definitions from config entries. Returns how many were added."""
        added = 0
        for entry in entries or []:
            name = entry.get("name", "")
            type_name = entry.get("type", "")

            cls = MODULE_REGISTRY.get(type_name)
            if not name or not cls:
                logger.warning("Unknown module type %r for module %r", type_name, name)
                continue

            config = {k: v for k, v in entry.items() if k not in ("name", "type", "preload")}
            definition = self.register(ModuleDefinition(name, cls, config, timers=self.timers))
            if entry.get("preload", True):
                definition.mark_loaded()
            added += 1

        logger.info("Module library: %d modules (%s)", added, ", ".join(self.names()))
        return added
