"""LogWriter — background thread that batches formatted lines and flushes them to disk.

Producers call ``enqueue`` (or ``log``) from any thread. Each call formats the
record, appends the text to an in-memory list and, at most once per debounce
interval, wakes the worker. The worker swaps the whole list out, lets the
rotation policy rename the destination if the day changed, and hands the
batch to the file writer. A watchdog thread forces a wake when lines have
been waiting longer than the idle timeout.

Nothing in here raises to a producer: failures end up in ``status``.
"""

import os
import threading
import time
import logging
from datetime import datetime

from logsink.archiver import Archiver
from logsink.config import WriterConfig, resolve_destination, resolve_folder
from logsink.file_writer import FileWriter
from logsink.formatter import format_record
from logsink.locks import default_locks
from logsink.models import LogLevel, LogMode, LogRecord
from logsink.rotation import RotationPolicy
from logsink.status import WriterStatus

logger = logging.getLogger(__name__)

JOIN_TIMEOUT_SECONDS = 5.0


class LogWriter(threading.Thread):
    def __init__(
        self,
        config: WriterConfig | None = None,
        formatter=None,
        locks=None,
        console=None,
        archiver=None,
        rename=None,
        status: WriterStatus | None = None,
        time_func=None,
        clock=None,
    ):
        self._config = config or WriterConfig()
        self._time_func = time_func or datetime.now
        self._clock = clock or time.monotonic
        self._formatter = formatter or format_record
        self._locks = locks or default_locks()
        self._mode = self._config.mode
        self._level = self._config.level
        self._status = status or WriterStatus()

        self._folder = resolve_folder(self._config)
        self._destination = resolve_destination(self._config, self._time_func().date())
        if self._mode.writes_file:
            os.makedirs(self._folder, exist_ok=True)

        if archiver is None and self._config.archive_enabled:
            archiver = Archiver(
                self._locks.archive_lock,
                compressor=self._config.compressor,
                timeout_seconds=self._config.archive_timeout_seconds,
            )
        self._rotation = RotationPolicy(
            self._destination,
            self._status,
            archiver=archiver,
            suffix_policy=self._config.file_suffix,
            max_file_size_bytes=self._config.max_file_size_bytes,
            time_func=self._time_func,
            rename=rename,
        )
        self._file_writer = FileWriter(self._destination, self._locks.write_lock, self._status, console)

        super().__init__(daemon=True, name=f"logsink-{os.path.basename(self._destination)}")

        # Guards _pending, _wake_pending, _stop_requested and both timestamps
        self._cond = threading.Condition()
        self._pending: list[str] = []
        self._wake_pending = False
        self._stop_requested = False
        self._last_wake_check = self._clock()
        self._last_active = self._clock()

        # Held for a whole drain so the stop flush cannot overtake the worker
        self._drain_lock = threading.Lock()
        self._start_lock = threading.Lock()

        self._watchdog_stop = threading.Event()
        self._watchdog = threading.Thread(
            target=self._watchdog_loop, daemon=True, name=f"{self.name}-watchdog"
        )

    # Properties

    @property
    def config(self) -> WriterConfig:
        return self._config

    @property
    def destination(self) -> str:
        return self._destination

    @property
    def mode(self) -> LogMode:
        return self._mode

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def status(self) -> WriterStatus:
        return self._status

    @property
    def rotation(self) -> RotationPolicy:
        return self._rotation

    @property
    def pending_count(self) -> int:
        with self._cond:
            return len(self._pending)

    @property
    def stop_requested(self) -> bool:
        with self._cond:
            return self._stop_requested

    # Lifecycle

    def start(self):
        """Start the worker and its watchdog. A no-op once the worker has run."""
        with self._start_lock:
            if self.ident is None:
                super().start()
                self._watchdog.start()

    def set_mode(self, mode: LogMode) -> None:
        """Change the output mode; starts the worker if it never ran."""
        self._mode = mode
        if mode.writes_file:
            os.makedirs(self._folder, exist_ok=True)

        if mode != LogMode.DISABLED:
            with self._start_lock:
                if self.ident is None and not self.stop_requested:
                    super().start()
                    self._watchdog.start()

    def set_level(self, level: LogLevel) -> None:
        self._level = level

    def close_destination(self) -> None:
        """Flush everything buffered, append the closing line and stop the worker.

        Lines enqueued after this call are accepted but never written.
        Calling it again is a no-op.
        """
        with self._cond:
            if self._stop_requested:
                return
            self._stop_requested = True

        with self._drain_lock:
            with self._cond:
                batch, self._pending = self._pending, []
            if batch:
                self._write_batch(batch, stopping=True)
            if self._mode != LogMode.DISABLED:
                closed = f"Closed {self._time_func().strftime('%a %b %d %H:%M:%S %Y')} \n"
                self._write_batch([closed], stopping=True)

        with self._cond:
            self._cond.notify_all()
        self._watchdog_stop.set()

        if threading.current_thread() is not self and self.ident is not None:
            self.join(timeout=JOIN_TIMEOUT_SECONDS)
        if threading.current_thread() is not self._watchdog and self._watchdog.ident is not None:
            self._watchdog.join(timeout=JOIN_TIMEOUT_SECONDS)
        logger.info("Log writer for %s closed", self._destination)

    stop = close_destination

    # Producer side

    def enqueue(self, record: LogRecord) -> None:
        """Format ``record`` and buffer it. Never raises."""
        if self._mode == LogMode.DISABLED:
            return

        try:
            text = self._formatter(record, self._config.message_options, self._level)
        except Exception:
            logger.exception("Formatter failed for record from module %s", record.module)
            return

        woke = False
        with self._cond:
            self._pending.append(text)
            now = self._clock()
            if (now - self._last_wake_check) * 1000 > self._config.debounce_ms:
                if not self._stop_requested:
                    self._wake_pending = True
                    self._cond.notify_all()
                    woke = True
                self._last_wake_check = now

        if woke:
            self._status.record_wake("debounce")

    def log(
        self,
        level: LogLevel,
        module: str,
        message: str,
        function: str = "",
        source_file: str = "",
        source_line: int = 0,
    ) -> None:
        """Build a record for the calling thread and enqueue it if ``level`` passes."""
        if self._mode == LogMode.DISABLED or level < self._level:
            return
        record = LogRecord(
            timestamp=self._time_func(),
            thread_id=str(threading.get_ident()),
            module=module,
            level=level,
            function=function,
            source_file=source_file,
            source_line=source_line,
            message=message,
        )
        self.enqueue(record)

    def force_push(self) -> bool:
        """Wake the worker if lines have waited longer than the idle timeout.

        Returns True when a wake was issued.
        """
        with self._cond:
            if not self._pending or self._stop_requested:
                return False
            if self._clock() - self._last_active <= self._config.idle_timeout_seconds:
                return False
            self._wake_pending = True
            self._cond.notify_all()

        self._status.record_wake("watchdog")
        return True

    # Worker side

    def run(self):
        logger.info("Log writer started for %s", self._destination)
        while True:
            with self._cond:
                while not self._wake_pending and not self._stop_requested:
                    self._cond.wait()
                self._wake_pending = False
                if self._stop_requested:
                    break
            try:
                self._drain()
            except Exception:
                logger.exception("Drain cycle for %s failed", self._destination)
        logger.debug("Log writer thread for %s exiting", self._destination)

    def _drain(self) -> None:
        with self._drain_lock:
            with self._cond:
                # The stop flush already took the final batch
                if self._stop_requested:
                    return
                batch, self._pending = self._pending, []
            if batch:
                self._write_batch(batch, stopping=False)
            with self._cond:
                self._last_active = self._clock()

    def _write_batch(self, lines: list[str], stopping: bool) -> None:
        mode = self._mode
        previous = None
        try:
            if mode != LogMode.ONLY_CONSOLE:
                result = self._rotation.rotate_if_needed(stopping=stopping)
                if result is not None:
                    previous = result.archive.describe() if result.archive else result.renamed_path
            self._file_writer.write(lines, mode, previous_name=previous)
        except Exception as e:
            logger.exception("Dropped batch of %d lines for %s", len(lines), self._destination)
            self._status.record_write_failure(self._destination, e, len(lines))
        self._status.record_drain()

    def _watchdog_loop(self):
        while not self._watchdog_stop.wait(timeout=self._config.watchdog_interval_seconds):
            self.force_push()
