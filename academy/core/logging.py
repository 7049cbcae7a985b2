"""Structured JSON Logging Configuration"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger

from academy.config import settings

_HANDLER_NAME = "academy-stdout"

# Set per request by RequestContextMiddleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "httpx": logging.WARNING,
}


class CorrelationIdFilter(logging.Filter):
    """Copy the current request id onto every record emitted while handling it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = request_id_var.get()
        return True


class AcademyJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, stamped with the service and request it came from"""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = settings.APP_NAME
        log_record["environment"] = settings.ENVIRONMENT
        if getattr(record, "correlation_id", None):
            log_record["correlation_id"] = record.correlation_id


def _build_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT == "json":
        return AcademyJsonFormatter(
            fmt="%(asctime)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)-7s [%(correlation_id)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def setup_logging() -> None:
    """Install the stdout handler on the root logger. Idempotent."""
    root_logger = logging.getLogger()
    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(_build_formatter())

    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.addHandler(handler)

    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
