"""Thread-safe counters shared by the adapters and the dashboard."""

import threading
import time
from collections import defaultdict


class Metrics:
    def __init__(self):
        self._lock = threading.Lock()
        self._sent = 0
        self._dropped: dict[str, int] = defaultdict(int)
        self._level_counts: dict[int, int] = defaultdict(int)
        self._start_time = time.monotonic()

    def record_sent(self, level: int):
        """Bump the sent counter and the per-severity counter."""
        with self._lock:
            self._sent += 1
            self._level_counts[level] += 1

    def record_dropped(self, reason: str):
        with self._lock:
            self._dropped[reason] += 1

    @property
    def sent(self) -> int:
        with self._lock:
            return self._sent

    @property
    def dropped(self) -> int:
        with self._lock:
            return sum(self._dropped.values())

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all metrics."""
        with self._lock:
            elapsed = time.monotonic() - self._start_time
            sent = self._sent
            dropped = dict(self._dropped)
            distribution = {str(level): n for level, n in sorted(self._level_counts.items())}

        return {
            "sent": sent,
            "dropped": sum(dropped.values()),
            "dropped_by_reason": dropped,
            "level_distribution": distribution,
            "elapsed_seconds": round(elapsed, 2),
            "messages_per_second": round(sent / elapsed, 2) if elapsed > 0 else 0.0,
        }
