"""In-memory ring buffer for recently dropped records."""

import threading
from datetime import datetime, timezone


class FailureTracker:
    def __init__(self, max_size: int = 100):
        self._max_size = max_size
        self._failures: list[dict] = []
        self._lock = threading.Lock()

    def add(self, route: str, reason: str, error: str, line: str = ""):
        """Store a failure, evicting the oldest if at capacity."""
        entry = {
            "time": datetime.now(timezone.utc).isoformat(),
            "route": route,
            "reason": reason,
            "error": error,
            "line": line[:200],
        }
        with self._lock:
            self._failures.append(entry)
            if len(self._failures) > self._max_size:
                self._failures.pop(0)

    def get_recent(self, n: int = 10) -> list[dict]:
        """Return the N most recent failures."""
        with self._lock:
            return list(self._failures[-n:]) if n > 0 else []

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._failures)
