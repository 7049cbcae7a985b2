"""Unit tests for request-scoped log correlation."""

import logging

from academy.core.logging import CorrelationIdFilter, request_id_var


def _record() -> logging.LogRecord:
    return logging.LogRecord("academy.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_stamps_current_request_id():
    token = request_id_var.set("req-42")
    try:
        record = _record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-42"
    finally:
        request_id_var.reset(token)


def test_filter_keeps_explicit_correlation_id():
    token = request_id_var.set("req-42")
    try:
        record = _record()
        record.correlation_id = "explicit"
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == "explicit"
    finally:
        request_id_var.reset(token)


def test_filter_outside_a_request():
    record = _record()
    CorrelationIdFilter().filter(record)
    assert record.correlation_id is None
