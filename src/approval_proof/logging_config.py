"""Logging configuration with a batch id for tracing verification runs.

Provides:
- JSON structured formatter (one object per line)
- a ``batch_id`` context variable stamped onto every record
- ``setup_logging`` for the CLI and embedding applications
"""
from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

batch_id_var: ContextVar[Optional[str]] = ContextVar("batch_id", default=None)

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "batch_id",
    )
)


class BatchContextFilter(logging.Filter):
    """Adds the current batch id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.batch_id = batch_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        batch_id = getattr(record, "batch_id", None)
        if batch_id:
            log_data["batch_id"] = batch_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # extra={...} fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
    stream: Any = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON structured logging (True) or a plain format (False)
        log_file: Optional file path for logging output
        stream: Console stream, stderr by default
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(batch_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(BatchContextFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(BatchContextFilter())
        root_logger.addHandler(file_handler)


def generate_batch_id() -> str:
    return f"batch_{uuid.uuid4().hex[:16]}"


def get_batch_id() -> Optional[str]:
    return batch_id_var.get()


class BatchLogContext:
    """Context manager that sets the batch id for the duration of a run."""

    def __init__(self, batch_id: Optional[str] = None):
        self.batch_id = batch_id or generate_batch_id()
        self._token = None

    def __enter__(self) -> "BatchLogContext":
        self._token = batch_id_var.set(self.batch_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        batch_id_var.reset(self._token)


__all__ = [
    "batch_id_var",
    "BatchContextFilter",
    "StructuredFormatter",
    "setup_logging",
    "generate_batch_id",
    "get_batch_id",
    "BatchLogContext",
]
