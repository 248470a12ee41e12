"""Thread-safe counters for the GELF writer."""

import threading
import time
from collections import defaultdict


class WriterMetrics:
    def __init__(self):
        self._lock = threading.Lock()
        self._records_sent = 0
        self._records_chunked = 0
        self._datagrams_sent = 0
        self._bytes_sent = 0
        self._drop_reasons: dict[str, int] = defaultdict(int)
        self._start_time = time.monotonic()

    def record_sent(self, datagrams: int, nbytes: int, chunked: bool = False):
        """Count one record that fully reached the socket."""
        with self._lock:
            self._records_sent += 1
            self._datagrams_sent += datagrams
            self._bytes_sent += nbytes
            if chunked:
                self._records_chunked += 1

    def record_dropped(self, reason: str, nbytes: int = 0):
        """Count one dropped record; *nbytes* of it had already left before the failure."""
        with self._lock:
            self._drop_reasons[reason] += 1
            self._bytes_sent += nbytes

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all metrics."""
        with self._lock:
            elapsed = time.monotonic() - self._start_time
            sent = self._records_sent
            reasons = dict(self._drop_reasons)
            snap = {
                "records_sent": sent,
                "records_chunked": self._records_chunked,
                "records_dropped": sum(reasons.values()),
                "drop_reasons": reasons,
                "datagrams_sent": self._datagrams_sent,
                "bytes_sent": self._bytes_sent,
            }

        snap["elapsed_seconds"] = round(elapsed, 2)
        snap["records_per_second"] = round(sent / elapsed, 2) if elapsed > 0 else 0.0
        return snap
