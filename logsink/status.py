"""Writer status — thread-safe counters that make swallowed failures observable."""

import threading
import time
import logging

logger = logging.getLogger(__name__)


class WriterStatus:
    """Counts wakes, drains, rotations and every failure the writer recovers from.

    The writer never raises to its callers, so this is the only place a
    failed rename, a dropped batch or a failed archive shows up. An optional
    listener is called with ``(event, detail)`` for each notable event.
    """

    def __init__(self, listener=None) -> None:
        self._lock = threading.Lock()
        self._listener = listener
        self._wake_signals: int = 0
        self._drain_cycles: int = 0
        self._lines_written: int = 0
        self._lines_dropped: int = 0
        self._write_failures: int = 0
        self._last_write_failed: bool = False
        self._last_write_error: str | None = None
        self._rotations: int = 0
        self._rotation_failures: int = 0
        self._archives: int = 0
        self._archive_failures: int = 0
        self._console_failures: int = 0
        self._last_archive = None
        self._start_time = time.monotonic()

    # Recording

    def record_wake(self, source: str = "debounce") -> None:
        with self._lock:
            self._wake_signals += 1
        self._notify("wake", source)

    def record_drain(self) -> None:
        with self._lock:
            self._drain_cycles += 1

    def record_write(self, line_count: int) -> None:
        with self._lock:
            self._lines_written += line_count
            self._last_write_failed = False

    def record_write_failure(self, path: str, error: Exception, line_count: int) -> None:
        with self._lock:
            self._write_failures += 1
            self._lines_dropped += line_count
            self._last_write_failed = True
            self._last_write_error = f"{path}: {error}"
        self._notify("write_failed", path)

    def record_rotation(self, renamed_path: str) -> None:
        with self._lock:
            self._rotations += 1
        self._notify("rotated", renamed_path)

    def record_rotation_failure(self, path: str, error: Exception) -> None:
        with self._lock:
            self._rotation_failures += 1
        self._notify("rotation_failed", f"{path}: {error}")

    def record_console_failure(self, error: Exception) -> None:
        with self._lock:
            self._console_failures += 1
        self._notify("console_failed", str(error))

    def record_archive(self, result) -> None:
        with self._lock:
            self._last_archive = result
            if result.ok:
                self._archives += 1
            else:
                self._archive_failures += 1
        self._notify("archived" if result.ok else "archive_failed", result.describe())

    # Reading

    @property
    def wake_signals(self) -> int:
        with self._lock:
            return self._wake_signals

    @property
    def drain_cycles(self) -> int:
        with self._lock:
            return self._drain_cycles

    @property
    def lines_written(self) -> int:
        with self._lock:
            return self._lines_written

    @property
    def lines_dropped(self) -> int:
        with self._lock:
            return self._lines_dropped

    @property
    def write_failures(self) -> int:
        with self._lock:
            return self._write_failures

    @property
    def last_write_failed(self) -> bool:
        with self._lock:
            return self._last_write_failed

    @property
    def last_write_error(self) -> str | None:
        with self._lock:
            return self._last_write_error

    @property
    def rotations(self) -> int:
        with self._lock:
            return self._rotations

    @property
    def rotation_failures(self) -> int:
        with self._lock:
            return self._rotation_failures

    @property
    def archives(self) -> int:
        with self._lock:
            return self._archives

    @property
    def archive_failures(self) -> int:
        with self._lock:
            return self._archive_failures

    @property
    def console_failures(self) -> int:
        with self._lock:
            return self._console_failures

    @property
    def last_archive(self):
        with self._lock:
            return self._last_archive

    def snapshot(self) -> dict:
        """Return a point-in-time copy of every counter."""
        with self._lock:
            return {
                "wake_signals": self._wake_signals,
                "drain_cycles": self._drain_cycles,
                "lines_written": self._lines_written,
                "lines_dropped": self._lines_dropped,
                "write_failures": self._write_failures,
                "last_write_failed": self._last_write_failed,
                "last_write_error": self._last_write_error,
                "rotations": self._rotations,
                "rotation_failures": self._rotation_failures,
                "archives": self._archives,
                "archive_failures": self._archive_failures,
                "console_failures": self._console_failures,
                "uptime_seconds": time.monotonic() - self._start_time,
            }

    def _notify(self, event: str, detail: str) -> None:
        if self._listener is None:
            return
        try:
            self._listener(event, detail)
        except Exception:
            logger.exception("Status listener failed for event %s", event)
