"""Log record model and the enums that describe writer behaviour."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, Flag, IntEnum, auto


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    @property
    def text(self) -> str:
        return self.name.capitalize()


class LogMode(Enum):
    DISABLED = "disabled"
    ONLY_FILE = "only_file"
    ONLY_CONSOLE = "only_console"
    FULL = "full"

    @property
    def writes_file(self) -> bool:
        return self in (LogMode.ONLY_FILE, LogMode.FULL)


class FileSuffixPolicy(Enum):
    """How a size-rotated file name is disambiguated."""

    DATE_TIME = "date_time"
    SEQUENTIAL_NUMBER = "sequential_number"


class MessageDisplay(Flag):
    DEFAULT = auto()
    LOG_LEVEL = auto()
    MODULE_NAME = auto()
    DATE_TIME = auto()
    THREAD_ID = auto()
    FUNCTION = auto()
    FILE = auto()
    LINE = auto()
    MESSAGE = auto()


@dataclass(frozen=True)
class LogRecord:
    timestamp: datetime
    thread_id: str
    module: str
    level: LogLevel
    function: str = ""
    source_file: str = ""
    source_line: int = 0
    message: str = ""


def parse_level(value: str) -> LogLevel:
    """Parse a level name case-insensitively ("warning", "WARN" and "Warning" all work)."""
    name = value.strip().upper()
    if name == "WARN":
        name = "WARNING"
    try:
        return LogLevel[name]
    except KeyError:
        raise ValueError(f"Unknown log level: {value!r}") from None


def parse_mode(value: str) -> LogMode:
    name = value.strip().lower().replace("-", "_")
    for mode in LogMode:
        if mode.value == name:
            return mode
    raise ValueError(f"Unknown log mode: {value!r}")


def parse_suffix_policy(value: str) -> FileSuffixPolicy:
    name = value.strip().lower().replace("-", "_")
    for policy in FileSuffixPolicy:
        if policy.value == name:
            return policy
    raise ValueError(f"Unknown file suffix policy: {value!r}")


def parse_message_options(names) -> MessageDisplay:
    """Combine flag names into one MessageDisplay value.

    Accepts either a comma-separated string or an iterable of names.
    An empty selection falls back to DEFAULT.
    """
    if isinstance(names, str):
        names = names.split(",")
    options = MessageDisplay(0)
    for raw in names:
        name = raw.strip().upper().replace("-", "_")
        if not name:
            continue
        try:
            options |= MessageDisplay[name]
        except KeyError:
            raise ValueError(f"Unknown message display option: {raw!r}") from None
    return options or MessageDisplay.DEFAULT
