"""Structured JSON logging with the current request id on every record."""

import logging
import sys
from contextvars import ContextVar
from typing import Any

from pythonjsonlogger import jsonlogger

from quizhub.core.config import settings

# Set by RequestIDMiddleware for the duration of a request
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn": logging.INFO,
    "strawberry": logging.WARNING,
}


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class QuizhubJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line: timestamp, level, logger, env, request_id, message, extras."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["env"] = settings.ENV
        request_id = getattr(record, "request_id", None)
        if request_id:
            log_record["request_id"] = request_id
        else:
            log_record.pop("request_id", None)

        log_record.pop("asctime", None)


def setup_logging() -> None:
    """Configure application logging from LOG_LEVEL."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        QuizhubJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
    # SQL echo only when debugging locally
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.ENV == "dev" and settings.LOG_LEVEL.upper() == "DEBUG" else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
