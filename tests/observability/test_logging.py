"""Tests for structured logging helpers and correlation ids."""

import json
import logging

import pytest

from astar_backend.observability.correlation import (
    CorrelationIdFilter,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from astar_backend.observability.log_utils import (
    REDACTED,
    build_log_context,
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from astar_backend.observability.logger import JsonFormatter


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("astar.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSafeLogValue:
    """Tests for safe_log_value."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "None"),
            ("plain", "plain"),
            ([1, 2, 3], "list(3 items)"),
            ({"a": 1}, "dict(1 keys)"),
            (42, "42"),
        ],
    )
    def test_converts_values(self, value, expected) -> None:
        assert safe_log_value(value) == expected

    def test_truncates_long_strings(self) -> None:
        result = safe_log_value("x" * 20, max_length=5)

        assert result == "xxxxx... (truncated, 20 total)"

    def test_build_log_context_redacts_secrets(self) -> None:
        context = build_log_context(Authorization="Bearer abc", tenant_id=7)

        assert context == {"Authorization": REDACTED, "tenant_id": "7"}

    def test_log_with_context_attaches_safe_extra(self, caplog) -> None:
        logger = logging.getLogger("astar_backend.tests.context")

        with caplog.at_level(logging.WARNING, logger=logger.name):
            log_with_context(logger, logging.WARNING, "Tag rejected", token="abc", tags=["a", "b"])

        record = caplog.records[-1]
        assert record.token == REDACTED
        assert record.tags == "list(2 items)"

    def test_log_exception_with_context_records_error_type(self, caplog) -> None:
        logger = logging.getLogger("astar_backend.tests.context")

        try:
            raise RuntimeError("disk full")
        except RuntimeError as exc:
            with caplog.at_level(logging.ERROR, logger=logger.name):
                log_exception_with_context(logger, "Upload failed", exc, endpoint="upload")

        record = caplog.records[-1]
        assert record.error_type == "RuntimeError"
        assert record.error_msg == "disk full"
        assert record.endpoint == "upload"
        assert record.exc_info is not None


class TestCorrelation:
    """Tests for correlation id propagation."""

    def test_generated_when_missing(self) -> None:
        value = set_correlation_id()

        assert get_correlation_id() == value
        assert len(value) == 36
        clear_correlation_id()
        assert get_correlation_id() == ""

    def test_filter_tags_records(self) -> None:
        set_correlation_id("req-1")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-1"
        clear_correlation_id()

        other = _record()
        CorrelationIdFilter().filter(other)
        assert other.correlation_id == "-"


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_includes_extra_context(self) -> None:
        record = _record("Expense created", expense_id="e-1", correlation_id="req-2")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "Expense created"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "astar.test"
        assert payload["correlation_id"] == "req-2"
        assert payload["expense_id"] == "e-1"
        assert "exception" not in payload
