"""Logging setup for applications embedding liftsheet."""

import json
import logging
from datetime import datetime

from .config import LoggingConfig

# Attributes passed through ``extra=`` by liftsheet modules
CONTEXT_FIELDS = ("date_key", "change_id", "state")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying sync context when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


LEVELS = {
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def setup_logging(level: str = "info", json_output: bool = False) -> logging.Handler:
    """Configure the root logger.

    Args:
        level: "warning", "info" or "debug". Unknown values fall back to info.
        json_output: Output logs as JSON lines for machine parsing.

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logging.basicConfig(
        level=LEVELS.get(level.lower(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    return handler


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """Apply the ``logging`` section of a loaded Config."""
    return setup_logging(config.level, json_output=config.json)
