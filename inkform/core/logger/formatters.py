"""
Formatters: JSON Lines for the rotating file, plain text for the console.
"""
from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

# Keys passed through ``extra=`` that are promoted to top-level JSON fields
CONTEXT_KEYS = ("studio_id", "appointment_id", "operation")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    ``logger.info("booked", extra={"appointment_id": appt.id})`` lands as
    ``{"appointment_id": "...", ...}`` so log lines can be filtered per
    appointment or studio.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_dict[key] = str(value)
        if record.exc_info:
            log_dict["exception"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).strip()
        log_dict["pathname"] = record.pathname
        log_dict["lineno"] = record.lineno
        return json.dumps(log_dict, default=str, ensure_ascii=False)


class PlainConsoleFormatter(logging.Formatter):
    """Human-readable format for console."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None) -> None:
        super().__init__(
            fmt=fmt or "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt=datefmt or "%Y-%m-%d %H:%M:%S",
        )
