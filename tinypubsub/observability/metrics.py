"""Per-registry counters and gauges, safe to update from several threads."""

import threading
from collections import Counter
from typing import Dict


class Metrics:
    """Collects registry events.

    Counters only go up; gauges hold the last value set. A disabled collector
    accepts every update and keeps nothing.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._lock = threading.Lock()
        self._counters: Counter = Counter()
        self._gauges: Dict[str, int] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def increment(self, name: str, value: int = 1) -> None:
        if not self._enabled:
            return
        with self._lock:
            self._counters[name] += value

    def set_gauge(self, name: str, value: int) -> None:
        if not self._enabled:
            return
        with self._lock:
            self._gauges[name] = value

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def get_gauge(self, name: str) -> int:
        with self._lock:
            return self._gauges.get(name, 0)

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        """Copy of every counter and gauge recorded so far."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
            }
