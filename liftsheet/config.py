"""Configuration loading for liftsheet."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class SheetsConfig:
    """Remote spreadsheet settings."""

    spreadsheet_id: str = ""
    base_url: str = "https://sheets.googleapis.com/v4/spreadsheets"
    session_sheet: str = "workout log"
    cardio_sheet: str = "cardio log"
    value_input_option: str = "USER_ENTERED"
    timeout_seconds: float = 30.0


@dataclass
class StorageConfig:
    """Local durable storage for cache, queue and token."""

    db_path: str = "~/.liftsheet/state.db"


@dataclass
class SyncConfig:
    start_online: bool = True
    append_missing_rows: bool = False  # Only update rows that already exist


@dataclass
class LoggingConfig:
    level: str = "info"  # "warning", "info" or "debug"
    json: bool = False


@dataclass
class Config:
    sheets: SheetsConfig = field(default_factory=SheetsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with LIFTSHEET_ prefix."""
    return os.environ.get(f"LIFTSHEET_{key}", default)


def _is_true(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    # Sheets overrides
    if spreadsheet_id := _get_env("SPREADSHEET_ID"):
        config.sheets.spreadsheet_id = spreadsheet_id
    if base_url := _get_env("SHEETS_BASE_URL"):
        config.sheets.base_url = base_url
    if timeout := _get_env("SHEETS_TIMEOUT"):
        config.sheets.timeout_seconds = float(timeout)

    # Storage overrides
    if db_path := _get_env("DB_PATH"):
        config.storage.db_path = db_path

    # Sync overrides
    if start_online := _get_env("START_ONLINE"):
        config.sync.start_online = _is_true(start_online)
    if append_missing := _get_env("APPEND_MISSING_ROWS"):
        config.sync.append_missing_rows = _is_true(append_missing)

    # Logging overrides
    if level := _get_env("LOG_LEVEL"):
        config.logging.level = level.lower()
    if json_output := _get_env("LOG_JSON"):
        config.logging.json = _is_true(json_output)

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded Config object.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            # Parse sheets config
            if "sheets" in data:
                sheets_data = data["sheets"]
                config.sheets = SheetsConfig(
                    spreadsheet_id=str(
                        sheets_data.get("spreadsheet_id", config.sheets.spreadsheet_id)
                    ),
                    base_url=sheets_data.get("base_url", config.sheets.base_url),
                    session_sheet=sheets_data.get(
                        "session_sheet", config.sheets.session_sheet
                    ),
                    cardio_sheet=sheets_data.get(
                        "cardio_sheet", config.sheets.cardio_sheet
                    ),
                    value_input_option=sheets_data.get(
                        "value_input_option", config.sheets.value_input_option
                    ),
                    timeout_seconds=float(
                        sheets_data.get("timeout_seconds", config.sheets.timeout_seconds)
                    ),
                )

            # Parse storage config
            if "storage" in data:
                config.storage = StorageConfig(
                    db_path=data["storage"].get("db_path", config.storage.db_path)
                )

            # Parse sync config
            if "sync" in data:
                sync_data = data["sync"]
                config.sync = SyncConfig(
                    start_online=sync_data.get("start_online", config.sync.start_online),
                    append_missing_rows=sync_data.get(
                        "append_missing_rows", config.sync.append_missing_rows
                    ),
                )

            # Parse logging config
            if "logging" in data:
                log_data = data["logging"]
                config.logging = LoggingConfig(
                    level=str(log_data.get("level", config.logging.level)).lower(),
                    json=log_data.get("json", config.logging.json),
                )

    # Apply environment variable overrides
    return _apply_env_overrides(config)
