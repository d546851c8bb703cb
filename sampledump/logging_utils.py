"""Structured logging utilities for the sample data dump tool."""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter
from typing import Any, TextIO

_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs", "pathname",
    "process", "processName", "relativeCreated", "stack_info",
    "exc_info", "exc_text", "thread", "threadName", "taskName",
    "message", "run_id",
})


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = getattr(record, "run_id", None)
        if run_id:
            log_data["run_id"] = run_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = _jsonable(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class RunIdFilter(logging.Filter):
    """Stamp every record with the id of the current CLI run."""

    _run_id: str | None = None

    @classmethod
    def set_run_id(cls, run_id: str | None) -> None:
        cls._run_id = run_id

    @classmethod
    def new_run_id(cls) -> str:
        cls._run_id = uuid.uuid4().hex[:12]
        return cls._run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self._run_id
        return True


TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO", json_format: bool = True, stream: TextIO | None = None) -> None:
    """Send all records to one handler on ``stream``, stderr by default.

    Dump scripts and command results never go through logging, so stdout stays
    untouched.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(RunIdFilter())

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_operation(logger: logging.Logger, operation: str, **context: Any):
    """Log start and end of a gateway operation, tagging both with ``operation``."""
    context = {"operation": operation, **context}
    start_time = perf_counter()
    logger.info(f"Starting {operation}", extra=context)

    def elapsed_ms() -> int:
        return int((perf_counter() - start_time) * 1000)

    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed {operation}",
            extra={**context, "duration_ms": elapsed_ms(), "error": str(e)},
            exc_info=True,
        )
        raise
    logger.info(f"Completed {operation}", extra={**context, "duration_ms": elapsed_ms()})
