import threading
from datetime import datetime, timedelta

import pytest

from logsink.config import WriterConfig
from logsink.locks import SharedLocks
from logsink.models import LogLevel, LogMode, LogRecord, MessageDisplay
from logsink.writer import LogWriter


class FakeClock:
    """Wall clock and monotonic clock that only move when told to."""

    def __init__(self, start: datetime):
        self.now = start
        self.mono = 0.0

    def time_func(self) -> datetime:
        return self.now

    def clock(self) -> float:
        return self.mono

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)
        self.mono += seconds


class Console:
    def __init__(self):
        self.lines: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        with self._lock:
            self.lines.append(line)


@pytest.fixture
def fake_clock():
    return FakeClock(datetime(2025, 1, 15, 12, 0, 0))


@pytest.fixture
def console():
    return Console()


@pytest.fixture
def make_record():
    def _make(message="hello", level=LogLevel.INFO, module="core", **kwargs):
        return LogRecord(
            timestamp=kwargs.pop("timestamp", datetime(2025, 1, 15, 12, 0, 0, 123000)),
            thread_id=kwargs.pop("thread_id", "42"),
            module=module,
            level=level,
            message=message,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_writer(tmp_path, console):
    """Factory for writers in tmp_path with archiving off and isolated locks."""
    created: list[LogWriter] = []

    def _make(**overrides):
        kwargs = {k: overrides.pop(k) for k in list(overrides)
                  if k in ("formatter", "console", "archiver", "rename", "status",
                           "time_func", "clock", "locks")}
        kwargs.setdefault("console", console)
        kwargs.setdefault("locks", SharedLocks())
        defaults = dict(
            file_name="app.log",
            folder=str(tmp_path / "logs"),
            level=LogLevel.INFO,
            mode=LogMode.ONLY_FILE,
            message_options=MessageDisplay.LOG_LEVEL | MessageDisplay.MESSAGE,
            archive_enabled=False,
        )
        defaults.update(overrides)
        writer = LogWriter(WriterConfig(**defaults), **kwargs)
        created.append(writer)
        return writer

    yield _make

    for writer in created:
        writer.close_destination()
