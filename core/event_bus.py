"""Thread-safe event bus for the wall.

Web handlers and other background threads push messages via publish().
The loop thread drains the queue on a repeating timer and dispatches to
subscribers, so everything that touches the state machine happens on the
loop thread.
"""

import logging
from queue import Queue, Empty
from typing import Any, Callable, Dict, List, Optional

from core.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)


class EventBus:
    """Central message bus bridging background threads to the loop thread."""

    def __init__(self, timers: TimerService, poll_ms: float = 50):
        self._timers = timers
        self._poll_ms = poll_ms
        self._queue = Queue()
        self._subscribers: Dict[str, List[Callable]] = {}
        self._timer: Optional[TimerHandle] = None

    def start(self):
        if self._timer is None or not self._timer.active:
            self._timer = self._timers.call_later(self._poll_ms, self._poll)

    def stop(self):
        self._timers.cancel(self._timer)
        self._timer = None

    def publish(self, topic: str, payload: Any):
        """Push data from any thread. Thread-safe."""
        self._queue.put((topic, payload))

    def subscribe(self, topic: str, callback: Callable):
        """Register a callback for a topic. Called on the loop thread."""
        if topic not in self._subscribers:
            self._subscribers[topic] = []
        self._subscribers[topic].append(callback)

    def unsubscribe(self, topic: str, callback: Callable):
        """Remove a callback. Bound methods match by equality, not identity."""
        if topic in self._subscribers:
            self._subscribers[topic] = [
                cb for cb in self._subscribers[topic] if cb != callback
            ]

    def drain(self, limit: int = 50) -> int:
        """Dispatch up to limit queued messages. Returns how many were handled."""
        handled = 0
        try:
            for _ in range(limit):
                topic, payload = self._queue.get_nowait()
                handled += 1
                for cb in list(self._subscribers.get(topic, [])):
                    try:
                        cb(payload)
                    except Exception as exc:
                        logger.error("EventBus callback error [%s]: %s", topic, exc)
        except Empty:
            pass
        return handled

    def _poll(self):
        self.drain()
        self._timer = self._timers.call_later(self._poll_ms, self._poll)
