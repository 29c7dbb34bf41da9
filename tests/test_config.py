"""Tests for logsink/config.py — WriterConfig, destination resolution and loaders."""

import argparse
import dataclasses
import os
from datetime import date

import pytest

from logsink.config import (
    WriterConfig,
    _parse_bool,
    load_config,
    load_yaml_config,
    resolve_destination,
    resolve_folder,
)
from logsink.models import FileSuffixPolicy, LogLevel, LogMode, MessageDisplay

ENV_VARS = (
    "LOG_FILE", "LOG_DIR", "LOG_LEVEL", "LOG_MODE", "LOG_FILE_SUFFIX", "LOG_MESSAGE_OPTIONS",
    "LOG_DEBOUNCE_MS", "LOG_IDLE_TIMEOUT", "LOG_MAX_FILE_SIZE_BYTES", "ARCHIVE_ENABLED",
    "ARCHIVE_COMPRESSOR", "ARCHIVE_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


# ── _parse_bool helper ──────────────────────────────────────────────

class TestParseBool:
    @pytest.mark.parametrize("value", ["true", "True", "1", "yes", " YES "])
    def test_truthy_values(self, value):
        assert _parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "", "random"])
    def test_falsy_values(self, value):
        assert _parse_bool(value) is False


# ── WriterConfig ────────────────────────────────────────────────────

class TestWriterConfig:
    def test_defaults(self):
        cfg = WriterConfig()
        assert cfg.mode == LogMode.FULL
        assert cfg.level == LogLevel.WARNING
        assert cfg.message_options == MessageDisplay.DEFAULT
        assert cfg.debounce_ms == 1000
        assert cfg.idle_timeout_seconds == 5.0
        assert cfg.max_file_size_bytes == 0
        assert cfg.compressor == "7z"
        assert cfg.archive_timeout_seconds == 900

    def test_frozen(self):
        cfg = WriterConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.mode = LogMode.DISABLED


class TestDestination:
    def test_default_folder_is_cwd_logs(self):
        assert resolve_folder(WriterConfig()) == os.path.join(os.getcwd(), "logs")

    def test_empty_name_uses_date(self):
        cfg = WriterConfig(folder="/var/log/app")
        assert resolve_destination(cfg, date(2025, 3, 4)) == os.path.join("/var/log/app", "2025-03-04.log")

    def test_name_without_dot_gets_log_extension(self):
        cfg = WriterConfig(folder="/x", file_name="server")
        assert resolve_destination(cfg, date.today()) == os.path.join("/x", "server.log")

    def test_name_with_extension_kept(self):
        cfg = WriterConfig(folder="/x", file_name="server.txt")
        assert resolve_destination(cfg, date.today()) == os.path.join("/x", "server.txt")


# ── YAML ────────────────────────────────────────────────────────────

class TestLoadYaml:
    def test_no_path(self):
        assert load_yaml_config(None) == {}

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "nope.yaml")) == {}

    def test_reads_file(self, tmp_path):
        path = tmp_path / "sink.yaml"
        path.write_text("file_name: app.log\nlevel: debug\n", encoding="utf-8")
        assert load_yaml_config(str(path)) == {"file_name": "app.log", "level": "debug"}


# ── load_config layering ────────────────────────────────────────────

class TestLoadConfig:
    def test_defaults(self, clean_env):
        assert load_config() == WriterConfig()

    def test_yaml_values(self, clean_env):
        cfg = load_config(yaml_data={
            "file_name": "svc.log",
            "level": "debug",
            "mode": "only_file",
            "file_suffix": "sequential_number",
            "message_options": ["log_level", "message"],
            "max_file_size_bytes": 1024,
            "archive": {"enabled": False, "compressor": "/opt/7z", "timeout_seconds": 60},
        })
        assert cfg.file_name == "svc.log"
        assert cfg.level == LogLevel.DEBUG
        assert cfg.mode == LogMode.ONLY_FILE
        assert cfg.file_suffix == FileSuffixPolicy.SEQUENTIAL_NUMBER
        assert cfg.message_options == MessageDisplay.LOG_LEVEL | MessageDisplay.MESSAGE
        assert cfg.max_file_size_bytes == 1024
        assert cfg.archive_enabled is False
        assert cfg.compressor == "/opt/7z"
        assert cfg.archive_timeout_seconds == 60.0

    def test_env_overrides_yaml(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "error")
        clean_env.setenv("ARCHIVE_ENABLED", "no")
        clean_env.setenv("LOG_DEBOUNCE_MS", "250")
        cfg = load_config(yaml_data={"level": "debug", "archive_enabled": True})
        assert cfg.level == LogLevel.ERROR
        assert cfg.archive_enabled is False
        assert cfg.debounce_ms == 250

    def test_cli_overrides_env(self, clean_env):
        clean_env.setenv("LOG_MODE", "full")
        args = argparse.Namespace(file="cli.log", dir="/tmp/cli", level="trace", mode="only_console")
        cfg = load_config(args, {})
        assert cfg.file_name == "cli.log"
        assert cfg.folder == "/tmp/cli"
        assert cfg.level == LogLevel.TRACE
        assert cfg.mode == LogMode.ONLY_CONSOLE

    def test_cli_none_values_ignored(self, clean_env):
        args = argparse.Namespace(file=None, dir=None, level=None, mode=None)
        assert load_config(args, {}) == WriterConfig()

    def test_invalid_level(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValueError):
            load_config()
