"""Root logger setup: human-readable lines or one JSON object per record."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .config import get_settings

# Context attached by generators and transitions through ``extra=``.
EXTRA_FIELDS = ("formation_id", "pattern", "seed", "count")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, carrying any formation context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key)) for key in EXTRA_FIELDS if hasattr(record, key)
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        return JSONFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Replace the root handlers with a single stdout handler.

    Unset arguments fall back to ``PROTOZOA_LOG_LEVEL`` / ``PROTOZOA_LOG_JSON``;
    an unknown level name means INFO.
    """
    if level is None or json_output is None:
        settings = get_settings()
        level = settings.log_level if level is None else level
        json_output = settings.log_json if json_output is None else json_output

    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(json_output))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)
