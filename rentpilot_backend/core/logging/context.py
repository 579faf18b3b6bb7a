"""Per-request logging context (transaction id and acting user)."""

import logging
import uuid
from contextvars import ContextVar

_transaction_id: ContextVar[str | None] = ContextVar("transaction_id", default=None)
_user_id: ContextVar[str | None] = ContextVar("user_id", default=None)


def generate_transaction_id() -> str:
    """Generate a short id for request tracking."""
    return str(uuid.uuid4())[:8]


def get_transaction_id() -> str:
    """Get the current transaction ID or generate a new one."""
    txn_id = _transaction_id.get()
    if txn_id is None:
        txn_id = generate_transaction_id()
        _transaction_id.set(txn_id)
    return txn_id


def set_transaction_id(txn_id: str) -> None:
    _transaction_id.set(txn_id)


def get_user_id() -> str | None:
    return _user_id.get()


def set_user_id(user_id: str | None) -> None:
    """Bind the authenticated user to the current request context."""
    _user_id.set(user_id)


class TransactionIdFilter(logging.Filter):
    """Logging filter that adds transaction and user ids to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.transaction_id = get_transaction_id()
        # A user_id passed in `extra` wins over the request context
        if getattr(record, "user_id", None) is None:
            record.user_id = get_user_id()
        return True
