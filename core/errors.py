"""Exceptions raised by the wall core."""


class WallError(Exception):
    """Base class for wall errors."""


class ModuleNotRegisteredError(WallError, KeyError):
    """A switch asked for a module name the library doesn't know.

    This is a configuration problem, not something to retry.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f'Somehow asked to show "{self.name}" which is not registered!'
