"""Logging infrastructure for RentPilot backend."""

from .context import (
    TransactionIdFilter,
    get_transaction_id,
    get_user_id,
    set_transaction_id,
    set_user_id,
)
from .logger_config import get_logger, setup_logging, shutdown_logging
from .middleware import RequestIdMiddleware

__all__ = [
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "RequestIdMiddleware",
    "TransactionIdFilter",
    "get_transaction_id",
    "set_transaction_id",
    "get_user_id",
    "set_user_id",
]
