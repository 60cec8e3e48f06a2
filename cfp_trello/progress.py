"""
Import progress log.
Human-readable status lines of the current run, readable from the status endpoint.
"""

import threading
from datetime import datetime


class ProgressLog:
    """Thread-safe, append-only log of progress lines."""

    def __init__(self, max_size: int = 5000):
        self.max_size = max_size
        self._lines: list[tuple[datetime, str]] = []
        self._lock = threading.Lock()

    def append(self, line: str) -> None:
        with self._lock:
            self._lines.append((datetime.now(), line))
            if len(self._lines) > self.max_size:
                self._lines = self._lines[-self.max_size:]

    def clear(self) -> None:
        with self._lock:
            self._lines = []

    def get_lines(self, limit: int = 0) -> list[str]:
        """Return the lines, oldest first; only the last `limit` ones if given."""
        with self._lock:
            lines = [line for _, line in self._lines]
        return lines[-limit:] if limit else lines

    def get_entries(self, limit: int = 0) -> list[dict]:
        """Timestamped lines, oldest first, as served by the status endpoint."""
        with self._lock:
            entries = [
                {"timestamp": timestamp.isoformat(), "line": line}
                for timestamp, line in self._lines
            ]
        return entries[-limit:] if limit else entries
