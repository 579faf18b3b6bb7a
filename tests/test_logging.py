"""Logging context tests."""

import contextvars
import logging

from rentpilot_backend.core.logging import TransactionIdFilter, set_user_id


def make_record(**extra) -> logging.LogRecord:
    return logging.getLogger("rentpilot_backend.test").makeRecord(
        "rentpilot_backend.test",
        logging.INFO,
        __file__,
        1,
        "Profile signed in",
        None,
        None,
        extra=extra,
    )


def run_filter(record, user_id=None) -> logging.LogRecord:
    def apply():
        set_user_id(user_id)
        TransactionIdFilter().filter(record)
        return record

    return contextvars.copy_context().run(apply)


def test_explicit_user_id_is_kept():
    record = run_filter(make_record(user_id="abc-123"))
    assert record.user_id == "abc-123"


def test_explicit_user_id_wins_over_request_context():
    record = run_filter(make_record(user_id="abc-123"), user_id="someone-else")
    assert record.user_id == "abc-123"


def test_request_user_fills_records_without_one():
    record = run_filter(make_record(), user_id="req-user")
    assert record.user_id == "req-user"
    assert record.transaction_id


def test_anonymous_record_has_no_user():
    assert run_filter(make_record()).user_id is None
