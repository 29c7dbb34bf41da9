"""Bridge from the standard logging module into a LogWriter."""

import logging
from datetime import datetime

from logsink.models import LogLevel, LogRecord

_INTERNAL_PREFIX = "logsink"
_exc_formatter = logging.Formatter()


def to_log_level(levelno: int) -> LogLevel:
    if levelno >= logging.CRITICAL:
        return LogLevel.FATAL
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARNING
    if levelno >= logging.INFO:
        return LogLevel.INFO
    if levelno >= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.TRACE


class SinkHandler(logging.Handler):
    """logging.Handler that enqueues records on a LogWriter.

    Records from the sink's own loggers are ignored so its diagnostics never
    loop back into it.
    """

    def __init__(self, writer, level=logging.NOTSET):
        super().__init__(level)
        self._writer = writer

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == _INTERNAL_PREFIX or record.name.startswith(_INTERNAL_PREFIX + "."):
            return
        level = to_log_level(record.levelno)
        if level < self._writer.level:
            return
        try:
            message = record.getMessage()
            if record.exc_info:
                message += "\n" + _exc_formatter.formatException(record.exc_info)
            self._writer.enqueue(LogRecord(
                timestamp=datetime.fromtimestamp(record.created),
                thread_id=str(record.thread),
                module=record.name,
                level=level,
                function=record.funcName or "",
                source_file=record.filename or "",
                source_line=record.lineno or 0,
                message=message,
            ))
        except Exception:
            self.handleError(record)
