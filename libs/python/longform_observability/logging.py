"""JSON logging on stdout, with fields bound per project and section."""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

_BOUND_FIELDS: ContextVar[Dict[str, Any]] = ContextVar("longform_bound_fields", default={})

# Attributes every LogRecord carries; anything else arrived through ``extra`` or a bound field.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

_ACCESS_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class ContextFilter(logging.Filter):
    """Stamp bound fields and the service name onto records that lack them."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _BOUND_FIELDS.get().items():
            record.__dict__.setdefault(key, value)
        record.__dict__.setdefault("service", self.service_name)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in sorted(record.__dict__.items())
            if key not in _RECORD_ATTRS and not key.startswith("_") and value is not None
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        # Unserialisable extras (UUIDs, enums, paths) fall back to their string form.
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(service_name: str, level: str | int | None = None) -> None:
    """Route the root and uvicorn loggers through one JSON stdout handler.

    ``level`` defaults to ``LONGFORM_LOG_LEVEL`` (``INFO`` when unset). A
    later call replaces the handler, so the last call wins.
    """

    level = level or os.getenv("LONGFORM_LOG_LEVEL", "INFO").upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": "longform_observability.logging.JsonFormatter"}},
            "filters": {
                "bound": {
                    "()": "longform_observability.logging.ContextFilter",
                    "service_name": service_name,
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "json",
                    "filters": ["bound"],
                }
            },
            "root": {"level": level, "handlers": ["stdout"]},
            "loggers": {
                name: {"handlers": ["stdout"], "level": level, "propagate": False}
                for name in _ACCESS_LOGGERS
            },
        }
    )


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind fields (project_id, section_id, backend...) to every log line in scope.

    Passing ``None`` for a field unbinds it for the duration of the block.
    """

    bound = {**_BOUND_FIELDS.get(), **fields}
    token = _BOUND_FIELDS.set({key: value for key, value in bound.items() if value is not None})
    try:
        yield
    finally:
        _BOUND_FIELDS.reset(token)
