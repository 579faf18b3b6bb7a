"""
Rotating file output for the application log.

Records are pushed onto a queue by the request path and written to disk
by a listener thread, so request handlers never block on file IO.
"""

import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler

from .structured_logger import build_formatter

# Third-party loggers routed through the application queue, with their floor level
EXTERNAL_LOGGERS = {
    "sqlalchemy": logging.WARNING,
    "asyncmy": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "passlib": logging.WARNING,
    "websockets": logging.WARNING,
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
}


class FileLogger:
    """Queue-backed writer for console and rotating file handlers."""

    def __init__(
        self,
        log_file_path: str,
        max_bytes: int,
        backup_count: int,
        log_level: str = "INFO",
        use_json_format: bool = True,
        service_version: str = "0.1.0",
    ):
        self.log_file_path = log_file_path
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.level = getattr(logging, log_level.upper())
        self.formatter = build_formatter(use_json_format, service_version)
        self._log_queue: queue.Queue = queue.Queue()
        self._listener: QueueListener | None = None
        self._queue_handler: QueueHandler | None = None

        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    def build_handlers(self) -> list[logging.Handler]:
        file_handler = RotatingFileHandler(
            self.log_file_path, maxBytes=self.max_bytes, backupCount=self.backup_count
        )
        console_handler = logging.StreamHandler(sys.stdout)
        for handler in (file_handler, console_handler):
            handler.setLevel(self.level)
            handler.setFormatter(self.formatter)
        return [file_handler, console_handler]

    def start(self) -> None:
        self._listener = QueueListener(
            self._log_queue, *self.build_handlers(), respect_handler_level=True
        )
        self._listener.start()

    @property
    def queue_handler(self) -> QueueHandler:
        if self._queue_handler is None:
            self._queue_handler = QueueHandler(self._log_queue)
            self._queue_handler.setLevel(self.level)
        return self._queue_handler

    def stop(self) -> None:
        """Flush pending records and stop the listener thread."""
        if self._listener:
            self._listener.stop()
            self._listener = None


def setup_file_logging(
    log_file_path: str,
    max_bytes: int,
    backup_count: int,
    log_level: str = "INFO",
    use_json_format: bool = True,
    service_version: str = "0.1.0",
) -> FileLogger | None:
    """Start queue-based file logging.

    Returns:
        The running FileLogger, or None if the log file could not be opened
    """
    try:
        file_logger = FileLogger(
            log_file_path=log_file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            log_level=log_level,
            use_json_format=use_json_format,
            service_version=service_version,
        )
        file_logger.start()
    except OSError as e:
        logging.getLogger("rentpilot_backend").error(
            "Failed to setup file logging", extra={"error": str(e)}
        )
        return None
    return file_logger


def configure_external_loggers(queue_handler: QueueHandler) -> None:
    """Send root, library and warnings output through the application queue."""
    for logger_name, level in EXTERNAL_LOGGERS.items():
        ext_logger = logging.getLogger(logger_name)
        ext_logger.handlers.clear()
        ext_logger.addHandler(queue_handler)
        ext_logger.propagate = False
        ext_logger.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(queue_handler)
    root_logger.setLevel(logging.INFO)

    logging.captureWarnings(True)
    warnings_logger = logging.getLogger("py.warnings")
    warnings_logger.handlers.clear()
    warnings_logger.addHandler(queue_handler)
    warnings_logger.propagate = False
