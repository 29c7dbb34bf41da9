"""File writer — appends a batch of formatted lines to the destination."""

import os
import sys
import logging

from logsink.models import LogMode

logger = logging.getLogger(__name__)


def stdout_sink(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


class FileWriter:
    """Appends batches to one destination path.

    The write lock is shared between writers and is held only while the
    file is open. A batch that cannot be written is dropped and recorded
    on the status object; nothing is raised.
    """

    def __init__(self, path: str, write_lock, status, console=None):
        self._path = path
        self._write_lock = write_lock
        self._status = status
        self._console = console or stdout_sink

    @property
    def path(self) -> str:
        return self._path

    def write(self, lines: list[str], mode: LogMode, previous_name: str | None = None) -> bool:
        """Write ``lines`` in order. Returns False when the batch was dropped."""
        if mode == LogMode.ONLY_CONSOLE:
            for line in lines:
                self._echo(line)
            return True

        try:
            folder = os.path.dirname(self._path)
            if folder:
                os.makedirs(folder, exist_ok=True)

            with self._write_lock:
                # Lone surrogates from fsdecoded paths are escaped, not fatal
                with open(self._path, "a", encoding="utf-8", errors="backslashreplace") as f:
                    if previous_name:
                        f.write(f"Previous log {previous_name}\n")
                    for line in lines:
                        f.write(line)
                        if mode == LogMode.FULL:
                            self._echo(line)
        except (OSError, ValueError) as e:
            logger.warning("Dropped batch of %d lines, cannot write %s: %s", len(lines), self._path, e)
            self._status.record_write_failure(self._path, e, len(lines))
            return False

        self._status.record_write(len(lines))
        logger.debug("Wrote %d lines to %s", len(lines), self._path)
        return True

    def _echo(self, line: str) -> None:
        try:
            self._console(line)
        except Exception as e:
            logger.warning("Console sink failed: %s", e)
            self._status.record_console_failure(e)
