"""Tests for the structured logging system (purchasing_kernel/logging_config.py)."""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest

from purchasing_kernel.exceptions import InsufficientStockError
from purchasing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite's setup."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


def _parse_log(stream: StringIO) -> dict:
    return _parse_all_logs(stream)[0]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "purchasing_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("approval_recorded", extra={"from_level": 2, "outcome": "advance"})

        record = _parse_log(stream)
        assert record["from_level"] == 2
        assert record["outcome"] == "advance"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", entity_id="PO-7")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["entity_id"] == "PO-7"

    def test_purchasing_error_fields_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise InsufficientStockError("item-1", "store-1", 3, 5)
        except InsufficientStockError:
            get_logger("test").error("reduction_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "InsufficientStockError"
        assert record["exc_code"] == "INSUFFICIENT_STOCK"
        assert record["exc_available"] == 3
        assert record["exc_required"] == 5
        assert "traceback" in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("with_uuid", extra={"order_id": uid})

        assert _parse_log(stream)["order_id"] == str(uid)

    def test_debug_filtered_at_info(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.debug("second")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["first"]


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_bind_restores_previous_value(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner", actor_id=uuid4()):
            assert LogContext.get_all()["correlation_id"] == "inner"
        assert LogContext.get_all() == {"correlation_id": "outer"}

    def test_bind_ignores_none_and_unknown_fields(self):
        with LogContext.bind(entity_id=None, po_number="PO-1"):
            assert LogContext.get_all() == {}

    def test_clear(self):
        LogContext.set(company_id="c", trace_id="t")
        LogContext.clear()
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)
        handlers = logging.getLogger("purchasing_kernel").handlers
        ours = [h for h in handlers if type(h).__module__ != "_pytest.logging"]
        assert h1 in handlers
        assert h2 not in handlers
        assert len(ours) == 1

    def test_engine_loggers_share_the_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        logging.getLogger("purchasing_kernel.engines.tracer").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "purchasing_kernel.engines.tracer"
