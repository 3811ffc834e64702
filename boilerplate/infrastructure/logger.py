"""Logging configuration.

All modules log through the standard library (``logging.getLogger(__name__)``)
and attach key/value context with ``extra=``:

    logger.info("request completed", extra={"method": "GET", "status": 200})

configure_logging() installs a single root handler that renders those
records either as JSON lines (production) or as readable ``key=value`` text
(development). Every line carries the service name and environment.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from boilerplate.infrastructure.config.settings import Settings

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else arrived through ``extra=``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class ServiceContextFilter(logging.Filter):
    """Stamp every record with the service name and environment."""

    def __init__(self, service: str, environment: str):
        super().__init__()
        self._service = service
        self._environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self._service
        record.environment = self._environment
        return True


class JSONFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def __init__(self, include_stack: bool = False):
        super().__init__()
        self._include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).strftime(TIME_FORMAT),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = repr(record.exc_info[1])
            if self._include_stack:
                payload["stack"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class KeyValueFormatter(logging.Formatter):
    """Human-readable format with ``key=value`` context appended."""

    def __init__(self, include_stack: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt=TIME_FORMAT,
        )
        self._include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        # Format without exc_info first so the stack lands after the context
        exc_info, exc_text = record.exc_info, record.exc_text
        record.exc_info, record.exc_text = None, None
        try:
            line = super().format(record)
        finally:
            record.exc_info, record.exc_text = exc_info, exc_text

        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())

        if exc_info and exc_info[1] is not None:
            if self._include_stack:
                line += "\n" + self.formatException(exc_info)
            else:
                line += f" error={exc_info[1]!r}"

        return line


def configure_logging(settings: Settings) -> None:
    """
    Configure the root logger from settings.

    JSON output is used in production or when LOG_FORMAT=json; stack traces
    are only written outside production.

    Args:
        settings: Application settings (log_level, log_format, environment)
    """
    include_stack = not settings.is_production
    if settings.is_production or settings.log_format == "json":
        formatter: logging.Formatter = JSONFormatter(include_stack=include_stack)
    else:
        formatter = KeyValueFormatter(include_stack=include_stack)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(ServiceContextFilter(settings.app_name, settings.environment))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(settings.log_level)

    # Route uvicorn's loggers through the root handler
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    # SQL statements are only logged when explicitly requested
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
