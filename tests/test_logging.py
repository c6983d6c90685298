"""Tests for the structured logging system (search_dimensions/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from search_dimensions.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "search_dimensions.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("dimension_registered", extra={"field": "state", "kind": "state"})

        record = _parse_log(stream)
        assert record["field"] == "state"
        assert record["kind"] == "state"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", model_type="Organization")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["model_type"] == "Organization"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_dimension_exception_code_extracted(self):
        """Search dimension exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from search_dimensions.exceptions import InvalidPathError

        try:
            raise InvalidPathError("x/A", "depth is not a non-negative integer")
        except InvalidPathError:
            logger.error("path_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "INVALID_PATH"
        assert record["exc_type"] == "InvalidPathError"
        assert record["exc_path"] == "x/A"
        assert record["exc_reason"] == "depth is not a non-negative integer"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "field" not in record

    def test_bound_context_wins_over_extra(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        with LogContext.bind(field="category"):
            logger.info("clash", extra={"field": "state", "kind": "state"})

        record = _parse_log(stream)
        assert record["field"] == "category"
        assert record["kind"] == "state"

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"search_id": uid})

        record = _parse_log(stream)
        assert record["search_id"] == str(uid)

    def test_decimal_and_set_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("mixed", extra={"score": Decimal("4.5"), "fields": {"state", "city"}})

        record = _parse_log(stream)
        assert record["score"] == "4.5"
        assert record["fields"] == ["city", "state"]

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", field="state")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "x", "field": "state"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner"):
            assert LogContext.get_all()["correlation_id"] == "inner"
        assert LogContext.get_all()["correlation_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "model_type" not in LogContext.get_all()
        with LogContext.bind(model_type="Organization"):
            assert LogContext.get_all()["model_type"] == "Organization"
        assert "model_type" not in LogContext.get_all()

    def test_nested_bind_restores_each_level(self):
        with LogContext.bind(model_type="Organization"):
            with LogContext.bind(field="state", model_type=None):
                assert LogContext.get_all() == {"model_type": "Organization", "field": "state"}
            assert LogContext.get_all() == {"model_type": "Organization"}
        assert LogContext.get_all() == {}

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(field="rating"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(unknown="x", field="rating"):
            assert LogContext.get_all() == {"field": "rating"}

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(field="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["field"] == "b"

    def test_all_fields(self):
        LogContext.set(correlation_id="c", model_type="m", field="f")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "c", "model_type": "m", "field": "f"}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("search_dimensions")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("domain.registry")
        assert logger.name == "search_dimensions.domain.registry"

    def test_logger_hierarchy(self):
        """Child loggers inherit the search_dimensions root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "search_dimensions.deep.nested.module"

    def test_reset_restores_propagation(self):
        configure_logging(handler=_make_handler()[0])
        reset_logging()
        root = logging.getLogger("search_dimensions")
        assert root.handlers == []
        assert root.propagate is True
