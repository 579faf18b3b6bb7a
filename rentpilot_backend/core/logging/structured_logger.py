"""
Structured JSON logging for RentPilot.
Every record carries the request's transaction id and the acting user id.
"""

import logging
import sys
import traceback
from datetime import datetime
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from .context import get_transaction_id, get_user_id

SERVICE_NAME = "rentpilot-backend"

# Keys whose values must never reach a log sink
REDACTED_KEYS = {"password", "new_password", "current_password", "token", "refresh_token"}


class StructuredFormatter(JsonFormatter):
    """JSON formatter that adds standard fields for observability."""

    def __init__(self, *args, service_version: str = "0.1.0", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_version = service_version

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now().astimezone().isoformat()
        log_record["transaction_id"] = getattr(
            record, "transaction_id", get_transaction_id()
        )
        log_record["user_id"] = getattr(record, "user_id", get_user_id())

        log_record["level"] = record.levelname
        log_record["logger_name"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        log_record["service"] = {
            "name": SERVICE_NAME,
            "version": self.service_version,
        }

        if record.exc_info:
            log_record["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        for key in REDACTED_KEYS & log_record.keys():
            log_record[key] = "***"

        for field in ["msg", "args", "created", "msecs", "relativeCreated", "pathname"]:
            log_record.pop(field, None)


def build_formatter(use_json_format: bool, service_version: str) -> logging.Formatter:
    """Formatter shared by console and file handlers."""
    if use_json_format:
        return StructuredFormatter(
            fmt="%(timestamp)s %(level)s %(transaction_id)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            service_version=service_version,
        )
    return logging.Formatter(
        "%(asctime)s | %(levelname)s | %(transaction_id)s | "
        "%(filename)s:%(lineno)d | %(message)s"
    )


def setup_structured_logging(
    log_level: str = "INFO",
    use_json_format: bool = True,
    service_version: str = "0.1.0",
) -> logging.Logger:
    """Log to stdout only.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR)
        use_json_format: JSON lines or a human readable line format
        service_version: Version reported in every JSON record

    Returns:
        Configured application logger
    """
    logger = logging.getLogger("rentpilot_backend")
    logger.setLevel(getattr(logging, log_level.upper()))

    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(build_formatter(use_json_format, service_version))

    logger.addHandler(console_handler)

    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)

    return logger
