"""Configuration loading from YAML, env vars, and CLI args."""

import os
import logging
from dataclasses import dataclass, field, replace
from datetime import date

import yaml

from logsink.archiver import DEFAULT_COMPRESSOR, DEFAULT_TIMEOUT_SECONDS
from logsink.models import (
    FileSuffixPolicy,
    LogLevel,
    LogMode,
    MessageDisplay,
    parse_level,
    parse_message_options,
    parse_mode,
    parse_suffix_policy,
)

logger = logging.getLogger(__name__)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class WriterConfig:
    file_name: str = ""
    folder: str = ""
    level: LogLevel = LogLevel.WARNING
    mode: LogMode = LogMode.FULL
    file_suffix: FileSuffixPolicy = FileSuffixPolicy.DATE_TIME
    message_options: MessageDisplay = field(default=MessageDisplay.DEFAULT)
    debounce_ms: int = 1000
    idle_timeout_seconds: float = 5.0
    watchdog_interval_seconds: float = 1.0
    max_file_size_bytes: int = 0  # 0 disables size rotation
    archive_enabled: bool = True
    compressor: str = DEFAULT_COMPRESSOR
    archive_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def resolve_folder(config: WriterConfig) -> str:
    """Folder holding the destination; ``<cwd>/logs`` when unset."""
    return config.folder or os.path.join(os.getcwd(), "logs")


def resolve_destination(config: WriterConfig, today: date) -> str:
    """Full destination path.

    An empty file name becomes ``<yyyy-mm-dd>.log``; a name without any dot
    gets ``.log`` appended.
    """
    name = config.file_name
    if not name:
        name = today.strftime("%Y-%m-%d") + ".log"
    elif "." not in name:
        name += ".log"
    return os.path.join(resolve_folder(config), name)


def load_yaml_config(path: str | None) -> dict:
    """Load writer settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


# key -> (env var, parser)
_SETTINGS = {
    "file_name": ("LOG_FILE", str),
    "folder": ("LOG_DIR", str),
    "level": ("LOG_LEVEL", parse_level),
    "mode": ("LOG_MODE", parse_mode),
    "file_suffix": ("LOG_FILE_SUFFIX", parse_suffix_policy),
    "message_options": ("LOG_MESSAGE_OPTIONS", parse_message_options),
    "debounce_ms": ("LOG_DEBOUNCE_MS", int),
    "idle_timeout_seconds": ("LOG_IDLE_TIMEOUT", float),
    "max_file_size_bytes": ("LOG_MAX_FILE_SIZE_BYTES", int),
    "archive_enabled": ("ARCHIVE_ENABLED", _parse_bool),
    "compressor": ("ARCHIVE_COMPRESSOR", str),
    "archive_timeout_seconds": ("ARCHIVE_TIMEOUT", float),
}


def _from_yaml(key: str, value, parser):
    if key == "archive_enabled" and isinstance(value, bool):
        return value
    if key == "message_options" and isinstance(value, list):
        return parse_message_options(value)
    return parser(str(value))


def load_config(cli_args=None, yaml_data: dict | None = None) -> WriterConfig:
    """Build WriterConfig: defaults < YAML < env vars < CLI args.

    Raises ValueError for unknown level, mode, suffix or display names.
    """
    values = {}

    for key, (_, parser) in _SETTINGS.items():
        if yaml_data and yaml_data.get(key) is not None:
            values[key] = _from_yaml(key, yaml_data[key], parser)

    archive = (yaml_data or {}).get("archive") or {}
    if "enabled" in archive:
        values["archive_enabled"] = bool(archive["enabled"])
    if archive.get("compressor"):
        values["compressor"] = str(archive["compressor"])
    if archive.get("timeout_seconds") is not None:
        values["archive_timeout_seconds"] = float(archive["timeout_seconds"])

    for key, (env_var, parser) in _SETTINGS.items():
        raw = os.environ.get(env_var)
        if raw is not None and raw != "":
            values[key] = parser(raw)

    config = replace(WriterConfig(), **values)

    if cli_args is not None:
        overrides = {}
        if getattr(cli_args, "file", None):
            overrides["file_name"] = cli_args.file
        if getattr(cli_args, "dir", None):
            overrides["folder"] = cli_args.dir
        if getattr(cli_args, "level", None):
            overrides["level"] = parse_level(cli_args.level)
        if getattr(cli_args, "mode", None):
            overrides["mode"] = parse_mode(cli_args.mode)
        if overrides:
            config = replace(config, **overrides)

    return config
