"""One-shot signals.

A Signal is resolved at most once. It is used for three things:
  - a module definition's "loaded" signal
  - a module's "ready to be shown" signal
  - the completion handle handed back from SwitchMachine.request_switch()

A completion handle whose request was superseded is discarded instead of
resolved, so anyone waiting on it simply never hears back.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

PENDING = "pending"
RESOLVED = "resolved"
DISCARDED = "discarded"


class Signal:
    """Single-resolution notification with callbacks."""

    def __init__(self, label: str = ""):
        self.label = label
        self._status = PENDING
        self._callbacks: List[Callable[[], None]] = []

    @property
    def status(self) -> str:
        return self._status

    @property
    def pending(self) -> bool:
        return self._status == PENDING

    @property
    def resolved(self) -> bool:
        return self._status == RESOLVED

    @property
    def discarded(self) -> bool:
        return self._status == DISCARDED

    def then(self, callback: Callable[[], None]):
        """Run callback once the signal resolves (now, if it already has)."""
        if self._status == RESOLVED:
            self._run(callback)
        elif self._status == PENDING:
            self._callbacks.append(callback)
        return self

    def remove(self, callback: Callable[[], None]) -> bool:
        """Detach a callback added with then(). Returns False if it wasn't waiting."""
        try:
            self._callbacks.remove(callback)
        except ValueError:
            return False
        return True

    def resolve(self) -> bool:
        """Resolve the signal. Returns False if it was not pending."""
        if self._status != PENDING:
            return False
        self._status = RESOLVED
        callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            self._run(cb)
        return True

    def discard(self) -> bool:
        """Drop a pending signal without resolving it."""
        if self._status != PENDING:
            return False
        self._status = DISCARDED
        self._callbacks = []
        logger.debug("Signal %s discarded", self.label or id(self))
        return True

    def _run(self, callback):
        try:
            callback()
        except Exception as exc:
            logger.error("Signal %s callback error: %s", self.label or id(self), exc)

    def __repr__(self):
        return f"<Signal {self.label!r} {self._status}>"
