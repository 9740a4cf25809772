"""Tests for configuration loading and logging setup."""

import json
import logging
import sys
import pytest

from liftsheet.config import LoggingConfig, load_config
from liftsheet.log import JSONFormatter, configure_logging, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SPREADSHEET_ID",
        "SHEETS_BASE_URL",
        "SHEETS_TIMEOUT",
        "DB_PATH",
        "START_ONLINE",
        "APPEND_MISSING_ROWS",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(f"LIFTSHEET_{name}", raising=False)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self):
        config = load_config()

        assert config.sheets.spreadsheet_id == ""
        assert config.sheets.session_sheet == "workout log"
        assert config.sheets.cardio_sheet == "cardio log"
        assert config.sheets.value_input_option == "USER_ENTERED"
        assert config.sync.start_online is True
        assert config.sync.append_missing_rows is False
        assert config.logging.level == "info"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.yaml")
        assert config.storage.db_path == "~/.liftsheet/state.db"

    def test_yaml_sections(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "sheets:\n"
            "  spreadsheet_id: abc123\n"
            "  session_sheet: lifts\n"
            "  timeout_seconds: 5\n"
            "storage:\n"
            "  db_path: /tmp/liftsheet.db\n"
            "sync:\n"
            "  append_missing_rows: true\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  json: true\n"
        )

        config = load_config(path)

        assert config.sheets.spreadsheet_id == "abc123"
        assert config.sheets.session_sheet == "lifts"
        assert config.sheets.cardio_sheet == "cardio log"
        assert config.sheets.timeout_seconds == 5.0
        assert config.storage.db_path == "/tmp/liftsheet.db"
        assert config.sync.append_missing_rows is True
        assert config.sync.start_online is True
        assert config.logging.level == "debug"
        assert config.logging.json is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).sheets.base_url.startswith("https://sheets.googleapis.com")

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("sheets:\n  spreadsheet_id: from-file\n")
        monkeypatch.setenv("LIFTSHEET_SPREADSHEET_ID", "from-env")
        monkeypatch.setenv("LIFTSHEET_START_ONLINE", "false")
        monkeypatch.setenv("LIFTSHEET_APPEND_MISSING_ROWS", "1")
        monkeypatch.setenv("LIFTSHEET_SHEETS_TIMEOUT", "2.5")
        monkeypatch.setenv("LIFTSHEET_LOG_LEVEL", "WARNING")

        config = load_config(path)

        assert config.sheets.spreadsheet_id == "from-env"
        assert config.sync.start_online is False
        assert config.sync.append_missing_rows is True
        assert config.sheets.timeout_seconds == 2.5
        assert config.logging.level == "warning"


class TestLogging:
    """Tests for setup_logging and JSONFormatter."""

    def test_json_formatter(self):
        record = logging.LogRecord(
            "liftsheet.sync", logging.INFO, __file__, 1, "Queued %s", ("3/14",), None
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["component"] == "liftsheet.sync"
        assert data["message"] == "Queued 3/14"
        assert "exception" not in data

    def test_json_formatter_with_exception(self):
        try:
            raise ValueError("bad cell")
        except ValueError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            "liftsheet", logging.ERROR, __file__, 1, "failed", None, exc_info
        )
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad cell" in data["exception"]

    def test_setup_logging_level(self, restore_root_logger):
        handler = setup_logging("debug")

        assert restore_root_logger.level == logging.DEBUG
        assert handler in restore_root_logger.handlers
        assert not isinstance(handler.formatter, JSONFormatter)

    def test_setup_logging_json(self, restore_root_logger):
        handler = setup_logging("nonsense", json_output=True)

        assert restore_root_logger.level == logging.INFO
        assert isinstance(handler.formatter, JSONFormatter)

    def test_json_formatter_includes_sync_context(self):
        record = logging.LogRecord(
            "liftsheet.storage.queue", logging.INFO, __file__, 1, "Queued", None, None
        )
        record.date_key = "3/14"
        record.change_id = "abc"

        data = json.loads(JSONFormatter().format(record))

        assert data["date_key"] == "3/14"
        assert data["change_id"] == "abc"
        assert "state" not in data

    def test_configure_logging_from_config(self, restore_root_logger):
        handler = configure_logging(LoggingConfig(level="warning", json=True))

        assert restore_root_logger.level == logging.WARNING
        assert isinstance(handler.formatter, JSONFormatter)

    def test_loaded_config_drives_logging(self, tmp_path, restore_root_logger):
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: debug\n")

        configure_logging(load_config(path).logging)

        assert restore_root_logger.level == logging.DEBUG
