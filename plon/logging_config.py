"""
Logging setup for applications embedding the plon engine.

The engine itself only calls get_logger(); setup_logging() is for the host
application and picks a colored console or JSON line format from settings.
"""

import json
import logging
import sys
from typing import Optional

from plon.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
RESET = "\x1b[0m"

# ANSI color per level
LEVEL_COLORS = {
    logging.DEBUG: "\x1b[38;20m",
    logging.INFO: "\x1b[32;20m",
    logging.WARNING: "\x1b[33;20m",
    logging.ERROR: "\x1b[31;20m",
    logging.CRITICAL: "\x1b[31;1m",
}


class ColoredFormatter(logging.Formatter):
    """Wraps each console line in its level's color."""

    def __init__(self):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record):
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{RESET}" if color else line


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """
    Replace the root logger's handlers with a single stdout handler.

    Args:
        level: Explicit level name. Falls back to settings.log_level, then to
            DEBUG or INFO depending on settings.debug.
        json_format: Emit JSON lines instead of colored text. Defaults to
            settings.log_json.
    """
    settings = get_settings()

    level_name = level or settings.log_level or ("DEBUG" if settings.debug else "INFO")
    numeric_level = getattr(logging, level_name.upper(), logging.INFO)
    if json_format is None:
        json_format = settings.log_json

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JsonFormatter() if json_format else ColoredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    logging.getLogger("plon").setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Logger for `name` under the 'plon' namespace (pass __name__)."""
    if not name.startswith("plon"):
        name = f"plon.{name}"
    return logging.getLogger(name)
