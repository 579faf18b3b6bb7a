"""
Central logging configuration for RentPilot.
Values come from the loaded settings; call sites may override them.
"""

import logging

from ...config import settings
from .context import TransactionIdFilter
from .file_logger import FileLogger, configure_external_loggers, setup_file_logging
from .structured_logger import setup_structured_logging


class LoggingConfig:
    """Owns the active handlers so they can be shut down cleanly."""

    def __init__(self):
        self.file_logger: FileLogger | None = None
        self.transaction_filter = TransactionIdFilter()
        self._is_configured = False

    def setup(
        self,
        log_to_file: bool,
        log_level: str,
        use_json_format: bool,
    ) -> logging.Logger:
        if self._is_configured:
            return get_logger()

        if log_to_file:
            self.file_logger = setup_file_logging(
                log_file_path=settings.log_file_path,
                max_bytes=settings.log_max_bytes,
                backup_count=settings.log_backup_count,
                log_level=log_level,
                use_json_format=use_json_format,
                service_version=settings.api_version,
            )

        if self.file_logger:
            queue_handler = self.file_logger.queue_handler
            queue_handler.addFilter(self.transaction_filter)
            configure_external_loggers(queue_handler)
        else:
            logger = setup_structured_logging(
                log_level, use_json_format, service_version=settings.api_version
            )
            for handler in logger.handlers:
                handler.addFilter(self.transaction_filter)

        self._is_configured = True
        return get_logger()

    def shutdown(self) -> None:
        if self.file_logger:
            self.file_logger.stop()
            self.file_logger = None
        self._is_configured = False


_logging_config = LoggingConfig()


def setup_logging(
    log_to_file: bool | None = None,
    log_level: str | None = None,
    use_json_format: bool | None = None,
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        log_to_file: Write through the rotating file logger (settings: log_to_file)
        log_level: DEBUG, INFO, WARNING or ERROR (settings: log_level)
        use_json_format: JSON lines instead of plain text (settings: log_format)

    Returns:
        The ``rentpilot_backend`` logger
    """
    if log_to_file is None:
        log_to_file = settings.log_to_file
    if log_level is None:
        log_level = settings.log_level
    if use_json_format is None:
        use_json_format = settings.log_format.lower() == "json"

    return _logging_config.setup(
        log_to_file=log_to_file,
        log_level=log_level,
        use_json_format=use_json_format,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    if name:
        return logging.getLogger(f"rentpilot_backend.{name}")
    return logging.getLogger("rentpilot_backend")


def shutdown_logging() -> None:
    _logging_config.shutdown()
