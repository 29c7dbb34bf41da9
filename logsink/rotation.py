"""Rotation policy — daily rename of the destination, with an optional size threshold."""

import os
import logging
from dataclasses import dataclass
from datetime import date, datetime

from logsink.archiver import ArchiveResult, archive_name_for
from logsink.models import FileSuffixPolicy

logger = logging.getLogger(__name__)

MAX_DUPLICATE_SEARCH = 10_000


class RotationError(Exception):
    """No free rotated file name could be found."""


@dataclass(frozen=True)
class RotationResult:
    previous_path: str
    renamed_path: str
    archive: object = None


def duplicate_filename(base: str, ext: str, limit: int = MAX_DUPLICATE_SEARCH) -> str:
    """Return the first free path among ``base+ext``, ``base(2)+ext``, ``base(3)+ext`` ..."""
    for n in range(1, limit + 1):
        path = base + ext if n == 1 else f"{base}({n}){ext}"
        if not os.path.exists(path):
            return path
    raise RotationError(f"No free file name for {base}{ext} after {limit} attempts")


def _initial_date(path: str, today: date) -> date:
    try:
        return datetime.fromtimestamp(os.path.getmtime(path)).date()
    except OSError:
        return today


class RotationPolicy:
    """Decides, once per drain cycle, whether the destination must be renamed.

    The date check always runs first: when the calendar day changed the file
    is renamed to ``<stem>_yyyy_MM_dd<ext>`` using the day being rotated away
    from. Otherwise, when ``max_file_size_bytes`` is set and the file has
    reached it, the file is renamed according to ``suffix_policy``.

    A failed rename leaves everything as it was so the next cycle retries.
    """

    def __init__(
        self,
        destination: str,
        status,
        archiver=None,
        suffix_policy: FileSuffixPolicy = FileSuffixPolicy.DATE_TIME,
        max_file_size_bytes: int = 0,
        time_func=None,
        rename=None,
    ):
        self._destination = destination
        self._status = status
        self._archiver = archiver
        self._suffix_policy = suffix_policy
        self._max_file_size = max_file_size_bytes
        self._time_func = time_func or datetime.now
        self._rename = rename or os.rename
        self._current_date = _initial_date(destination, self._time_func().date())

    @property
    def current_date(self) -> date:
        return self._current_date

    @property
    def destination(self) -> str:
        return self._destination

    def rotate_if_needed(self, stopping: bool = False) -> RotationResult | None:
        """Rename the destination if due. Returns what happened, or None."""
        now = self._time_func()
        today = now.date()

        if self._current_date != today:
            return self._rotate_by_date(today, stopping)

        if self._max_file_size > 0 and self._size() >= self._max_file_size:
            return self._rotate_by_size(now, stopping)

        return None

    def _size(self) -> int:
        try:
            return os.path.getsize(self._destination)
        except OSError:
            return 0

    def _rotate_by_date(self, today: date, stopping: bool) -> RotationResult | None:
        if not os.path.exists(self._destination):
            # Nothing was written on the old day
            self._current_date = today
            return None

        stem, ext = os.path.splitext(self._destination)
        dated = stem + self._current_date.strftime("_%Y_%m_%d")
        try:
            new_name = duplicate_filename(dated, ext)
        except RotationError as e:
            self._fail(e)
            return None

        if not self._try_rename(new_name):
            return None

        self._current_date = today
        return self._finish(new_name, stopping)

    def _rotate_by_size(self, now: datetime, stopping: bool) -> RotationResult | None:
        stem, ext = os.path.splitext(self._destination)
        try:
            if self._suffix_policy == FileSuffixPolicy.DATE_TIME:
                new_name = f"{stem}_{now.strftime('%d_%m_%y__%H_%M_%S')}{ext}"
                if os.path.exists(new_name):
                    new_name = duplicate_filename(os.path.splitext(new_name)[0], ext)
            else:
                new_name = duplicate_filename(stem, ext)
        except RotationError as e:
            self._fail(e)
            return None

        if not self._try_rename(new_name):
            return None
        return self._finish(new_name, stopping)

    def _try_rename(self, new_name: str) -> bool:
        try:
            self._rename(self._destination, new_name)
        except OSError as e:
            self._fail(e)
            return False
        return True

    def _fail(self, error: Exception) -> None:
        logger.warning("Rotation of %s skipped, will retry: %s", self._destination, error)
        self._status.record_rotation_failure(self._destination, error)

    def _finish(self, new_name: str, stopping: bool) -> RotationResult:
        logger.info("Rotated %s -> %s", self._destination, new_name)
        self._status.record_rotation(new_name)

        archive = None
        # Shutdown must not wait for the compressor
        if self._archiver is not None and not stopping:
            try:
                archive = self._archiver.archive(new_name)
            except Exception:
                logger.exception("Archiver raised for %s", new_name)
                archive = ArchiveResult(new_name, archive_name_for(new_name), False, None, True, 0)
            self._status.record_archive(archive)

        return RotationResult(previous_path=self._destination, renamed_path=new_name, archive=archive)
