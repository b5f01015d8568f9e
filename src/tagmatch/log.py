"""Logging setup shared by scripts and tests."""

from __future__ import annotations

import json
import logging
from typing import Optional

from tagmatch.config import get_settings

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def build_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    return handler


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure root logging from settings.

    Args:
        level: Override for ``Settings.log_level``
        fmt: Override for ``Settings.log_format`` ('json' or 'console')
    """
    current = get_settings()
    level = (level or current.log_level).upper()
    fmt = (fmt or current.log_format).lower()

    logging.basicConfig(
        level=getattr(logging, level),
        handlers=[build_handler(fmt)],
        force=True,
    )
