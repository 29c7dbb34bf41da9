"""Locks shared between writer instances."""

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SharedLocks:
    """Serializes physical file appends and compressor runs across writers.

    Writers built with the same SharedLocks never interleave appends and
    never archive concurrently. Tests pass a fresh instance to stay isolated.
    """

    write_lock: threading.Lock = field(default_factory=threading.Lock)
    archive_lock: threading.Lock = field(default_factory=threading.Lock)


_process_locks = SharedLocks()


def default_locks() -> SharedLocks:
    """Return the process-wide lock pair."""
    return _process_locks
