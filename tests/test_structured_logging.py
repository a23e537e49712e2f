"""
Tests for structured logging.

Covers:
- JSON formatting of records, extras and context fields
- LogContext set/bind/clear semantics
- Exception payloads carrying ParksFinanceError fields
"""

import json
import logging
import sys
from decimal import Decimal
from uuid import UUID

import pytest

from parks_kernel.exceptions import BudgetNotEditableError
from parks_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def _record(msg="event", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord("parks_kernel.test", level, __file__, 1, msg, (), exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:

    def setup_method(self):
        self.formatter = StructuredFormatter()

    def test_single_json_line(self):
        payload = json.loads(self.formatter.format(_record("budget_created", year=2025)))

        assert payload["message"] == "budget_created"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "parks_kernel.test"
        assert payload["year"] == 2025
        assert "ts" in payload

    def test_non_json_types(self):
        payload = json.loads(self.formatter.format(_record(
            amount=Decimal("10.50"),
            actor=UUID("00000000-0000-4000-a000-000000000001"),
        )))
        assert payload["amount"] == "10.50"
        assert payload["actor"] == "00000000-0000-4000-a000-000000000001"

    def test_context_fields_included(self):
        with LogContext.bind(budget_id="b-1", park_id=7):
            payload = json.loads(self.formatter.format(_record()))
        assert payload["budget_id"] == "b-1"
        assert payload["park_id"] == "7"

    def test_exception_fields(self):
        try:
            raise BudgetNotEditableError("b-9", "active")
        except BudgetNotEditableError:
            payload = json.loads(self.formatter.format(_record(
                "edit_rejected", level=logging.ERROR, exc_info=sys.exc_info(),
            )))

        assert payload["exc_type"] == "BudgetNotEditableError"
        assert payload["exc_code"] == "BUDGET_NOT_EDITABLE"
        assert payload["exc_status"] == "active"
        assert "traceback" in payload


class TestLogContext:

    def test_set_and_clear(self):
        LogContext.set(correlation_id="c-1", actor_id=None)
        assert LogContext.get_all() == {"correlation_id": "c-1"}
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_unknown_field(self):
        with pytest.raises(TypeError):
            LogContext.set(tenant="x")

    def test_bind_restores_previous_values(self):
        LogContext.set(budget_id="outer")
        with LogContext.bind(budget_id="inner", park_id=None):
            assert LogContext.get_all() == {"budget_id": "inner"}
        assert LogContext.get_all() == {"budget_id": "outer"}


class TestLoggerHierarchy:

    def test_loggers_share_namespace(self, captured_logs):
        get_logger("engines.demo").info("demo_event", extra={"value": 1})

        records = [r for r in captured_logs() if r["message"] == "demo_event"]
        assert records[0]["logger"] == "parks_kernel.engines.demo"
        assert records[0]["value"] == 1

    def test_configure_is_idempotent(self):
        root = logging.getLogger("parks_kernel")
        before = len(root.handlers)
        configure_logging(level=logging.INFO)
        assert len(root.handlers) == before
