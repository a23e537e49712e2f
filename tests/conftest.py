"""
Pytest fixtures for the parks finance test suite.

Provides:
- Structured logging configuration and log capture
- In-memory SQLite sessions with the full schema
- Deterministic clock, actor id and a default analytics configuration
- Small category/line builders for engine tests
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from parks_config import get_active_config
from parks_kernel.db.engine import (
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from parks_kernel.domain.budget import BudgetLine
from parks_kernel.domain.catalog import Category, CategoryCatalog, CategoryType
from parks_kernel.domain.clock import DeterministicClock
from parks_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from parks_modules.orm_registry import create_all_tables

# Test actor ID for all write operations
TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture parks_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            builder.build(...)
            assert any(r["message"] == "cashflow_matrix_built" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("parks_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session():
    """A session on a fresh in-memory SQLite database with every table."""
    init_engine_from_url("sqlite:///:memory:")
    create_all_tables()
    s = get_session()
    yield s
    s.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def actor_id():
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture(scope="session")
def analytics_config():
    """The packaged default analytics configuration."""
    return get_active_config()


# =============================================================================
# Domain builders
# =============================================================================


@pytest.fixture
def parks_catalog():
    """Donations and Concessions (income), Maintenance and Payroll (expense)."""
    return CategoryCatalog([
        Category(id="donations", name="Donations", type=CategoryType.INCOME),
        Category(id="concessions", name="Concessions", type=CategoryType.INCOME),
        Category(id="maintenance", name="Maintenance", type=CategoryType.EXPENSE),
        Category(id="payroll", name="Payroll", type=CategoryType.EXPENSE),
    ])


@pytest.fixture
def make_line():
    """Factory for budget lines with sequential ids."""
    counter = iter(range(1, 10_000))

    def _make(category_id, amount, distribution=None, concept=None, budget_id="b-1"):
        n = next(counter)
        return BudgetLine(
            id=f"line-{n}",
            budget_id=budget_id,
            category_id=category_id,
            concept=concept or f"Line {n}",
            projected_amount=Decimal(amount),
            monthly_distribution=(
                tuple(Decimal(v) for v in distribution) if distribution is not None else None
            ),
        )

    return _make
