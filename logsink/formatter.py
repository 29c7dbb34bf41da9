"""Default one-line rendering of a LogRecord."""

from datetime import datetime

from logsink.models import LogLevel, LogRecord, MessageDisplay


def format_timestamp(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S:") + f"{ts.microsecond // 1000:03d}"


def _context(record: LogRecord, options: MessageDisplay, writer_level: LogLevel) -> str:
    # Source location is only shown by writers configured at Debug or below.
    if writer_level > LogLevel.DEBUG or not record.source_file:
        return ""
    if MessageDisplay.FILE in options and MessageDisplay.LINE in options and record.source_line > 0:
        return f"{{{record.source_file}:{record.source_line}}}"
    if MessageDisplay.FILE in options and MessageDisplay.FUNCTION in options and record.function:
        return f"{{{record.source_file}}}{{{record.function}}}"
    return ""


def format_record(record: LogRecord, options: MessageDisplay, writer_level: LogLevel) -> str:
    """Render a record as a single newline-terminated line. Never raises for a valid record."""
    context = _context(record, options, writer_level)

    if MessageDisplay.DEFAULT in options:
        return (
            f"[{record.level.text}][{record.module}][{format_timestamp(record.timestamp)}]"
            f"[{record.thread_id}]{context} {record.message}\n"
        )

    text = ""
    if MessageDisplay.LOG_LEVEL in options:
        text += f"[{record.level.text}]"
    if MessageDisplay.MODULE_NAME in options:
        text += f"[{record.module}]"
    if MessageDisplay.DATE_TIME in options:
        text += f"[{format_timestamp(record.timestamp)}]"
    if MessageDisplay.THREAD_ID in options:
        text += f"[{record.thread_id}]"
    text += context
    if MessageDisplay.MESSAGE in options:
        if not text or text.endswith(" "):
            text += record.message
        else:
            text += f" {record.message}"

    return text + "\n"
