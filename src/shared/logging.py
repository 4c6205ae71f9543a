"""Structured JSON logging with case_id support."""
from __future__ import annotations

import contextvars
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from src.shared.constants import HARNESS_LOGGER

# Context variable for the running test case
case_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "case_id", default=""
)


class JSONFormatter(logging.Formatter):
    """Custom JSON log formatter."""

    def __init__(self, service_name: str = "unknown") -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service_name": self.service_name,
            "logger": record.name,
            "case_id": case_id_var.get(""),
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


def resolve_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its number, defaulting to INFO."""
    value = getattr(logging, level.upper(), None)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(service_name: str = HARNESS_LOGGER, level: str = "INFO") -> logging.Logger:
    """Configure structured JSON logging for the harness.

    Args:
        service_name: Name recorded in every log entry; also the logger name.
        level: Log level string (e.g. "INFO", "DEBUG").

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(resolve_level(level))

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter(service_name=service_name))
    logger.addHandler(handler)

    return logger


@contextmanager
def case_scope(case_id: str) -> Iterator[str]:
    """Bind ``case_id_var`` for the duration of a ``with`` block."""
    token = case_id_var.set(case_id)
    try:
        yield case_id
    finally:
        case_id_var.reset(token)
