"""Monitoring sink for the wall.

Observations are plain dicts such as {"time", "state", "deadline"} or
{"time", "event", "deadline"}. When monitoring is disabled update() does
nothing, and nothing in the wall depends on it either way. The web API
reads the history from its own threads.
"""

import logging
import threading
from collections import deque
from typing import Any, Callable, Dict, List, Optional

from core.timers import now_ms

logger = logging.getLogger(__name__)


class Monitor:
    """Keeps a bounded history of observations."""

    def __init__(self, enabled: bool = False, history_len: int = 200,
                 clock: Optional[Callable[[], float]] = None):
        self.enabled = enabled
        self._clock = clock or now_ms
        self._lock = threading.Lock()
        self._history: deque = deque(maxlen=history_len)

    def is_enabled(self) -> bool:
        return self.enabled

    def update(self, observation: Dict[str, Any]):
        if not self.enabled:
            return
        observation = dict(observation)
        observation.setdefault("time", self._clock())
        with self._lock:
            self._history.append(observation)
        logger.debug("monitor: %s", observation)

    def history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent observations, oldest first. limit <= 0 gives none."""
        with self._lock:
            items = list(self._history)
        if limit is None:
            return items
        if limit <= 0:
            return []
        return items[-limit:]
