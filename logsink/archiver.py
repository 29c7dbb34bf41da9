"""Archiver — compresses rotated log files with an external 7z binary."""

import os
import subprocess
import time
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSOR = "7z"
DEFAULT_TIMEOUT_SECONDS = 15 * 60


@dataclass(frozen=True)
class ArchiveResult:
    path: str
    archive_name: str
    finished: bool
    return_code: int | None
    crashed: bool
    elapsed_ms: int

    @property
    def ok(self) -> bool:
        return self.finished and not self.crashed and self.return_code == 0

    def describe(self) -> str:
        status = "the process crashed" if self.crashed else "the process exited normally"
        return (
            f"{self.path} to archive: {self.archive_name}. "
            f"finished: {'yes' if self.finished else 'no'}, {status}, "
            f"exit code {self.return_code}. Time: {self.elapsed_ms} ms"
        )


def archive_name_for(path: str) -> str:
    """Replace the file extension with .7z."""
    return os.path.splitext(path)[0] + ".7z"


class Archiver:
    """Runs ``<compressor> a -t7z -mx9 <archive> <path>`` one file at a time.

    ``lock`` is shared by every writer in the process so at most one
    compressor runs at once. ``runner`` defaults to ``subprocess.run`` and
    is replaced in tests.
    """

    def __init__(self, lock, compressor: str = DEFAULT_COMPRESSOR,
                 timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS, runner=None):
        self._lock = lock
        self._compressor = compressor
        self._timeout = timeout_seconds
        self._runner = runner or subprocess.run

    def command_for(self, path: str) -> list[str]:
        return [self._compressor, "a", "-t7z", "-mx9", archive_name_for(path), path]

    def archive(self, path: str) -> ArchiveResult:
        """Compress ``path`` and report how it went. Never raises."""
        cmd = self.command_for(path)
        archive_name = cmd[4]

        with self._lock:
            start = time.monotonic()
            finished = True
            crashed = False
            return_code = None
            try:
                proc = self._runner(
                    cmd,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=self._timeout,
                )
                return_code = proc.returncode
                # Negative return codes mean the process was killed by a signal
                crashed = return_code < 0
            except subprocess.TimeoutExpired:
                finished = False
            except OSError as e:
                logger.warning("Could not start compressor %s: %s", self._compressor, e)
                crashed = True
            elapsed_ms = int((time.monotonic() - start) * 1000)

        result = ArchiveResult(
            path=path,
            archive_name=archive_name,
            finished=finished,
            return_code=return_code,
            crashed=crashed,
            elapsed_ms=elapsed_ms,
        )
        if result.ok:
            logger.info("Archived %s", result.describe())
        else:
            logger.warning("Archiving failed: %s", result.describe())
        return result
