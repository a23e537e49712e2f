"""
Typed Exception Hierarchy for the Parks Finance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the analytics engine surface failures to the user as validation
messages.  Matching on message text is fragile, so every error has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        matrix = builder.build(year=2025, scope=scope, categories=catalog,
                               budget_lines=lines, actuals=actuals)
    except UnknownCategoryError as e:
        return {"error": e.code, "category_id": str(e.category_id)}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from ParksFinanceError:

    ParksFinanceError (base)
    |
    +-- CategoryError
    |   +-- UnknownCategoryError
    |   +-- CategoryCycleError
    |
    +-- BudgetError
    |   +-- InvalidBudgetLineError
    |   +-- BudgetNotFoundError
    |   +-- BudgetLineNotFoundError
    |   +-- BudgetNotEditableError
    |   +-- InvalidBudgetTransitionError
    |
    +-- ProjectionError
    |   +-- InvalidBaseSummaryError
    |   +-- InvalidProjectionRequestError
    |
    +-- ConfigError
        +-- InvalidConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Category        | UNKNOWN_CATEGORY              | Actual/line references a missing category
                | CATEGORY_CYCLE                | parent_id chain loops back on itself
----------------|-------------------------------|---------------------------------------
Budget          | INVALID_BUDGET_LINE           | Negative amount or malformed distribution
                | BUDGET_NOT_FOUND              | Budget ID doesn't exist
                | BUDGET_LINE_NOT_FOUND         | Budget line ID doesn't exist
                | BUDGET_NOT_EDITABLE           | Line change on a non-draft budget
                | INVALID_BUDGET_TRANSITION     | Status change not allowed by lifecycle
----------------|-------------------------------|---------------------------------------
Projection      | INVALID_BASE_SUMMARY          | Negative base income/expenses
                | INVALID_PROJECTION_REQUEST    | Negative horizon or impossible rates
----------------|-------------------------------|---------------------------------------
Config          | INVALID_CONFIG                | YAML configuration cannot be parsed

Zero-denominator ratios are NOT errors.  They are explicit branches that
return a ``Ratio`` sentinel (see ``parks_kernel.domain.ratio``) or the
documented 0/100 variance values.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class ParksFinanceError(Exception):
    """
    Base exception for all parks finance errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PARKS_FINANCE_ERROR"


# Category exceptions


class CategoryError(ParksFinanceError):
    """Base exception for category catalog errors."""

    code: str = "CATEGORY_ERROR"


class UnknownCategoryError(CategoryError):
    """A record references a category that is absent from the catalog."""

    code: str = "UNKNOWN_CATEGORY"

    def __init__(self, category_id: Any, source: str = "actual"):
        self.category_id = category_id
        self.source = source
        super().__init__(
            f"Unknown category {category_id} referenced by {source}"
        )


class CategoryCycleError(CategoryError):
    """The parent_id chain of a category loops back on itself."""

    code: str = "CATEGORY_CYCLE"

    def __init__(self, category_id: Any):
        self.category_id = category_id
        super().__init__(f"Category hierarchy cycle detected at {category_id}")


# Budget exceptions


class BudgetError(ParksFinanceError):
    """Base exception for budget errors."""

    code: str = "BUDGET_ERROR"


class InvalidBudgetLineError(BudgetError):
    """Budget line failed construction-time validation."""

    code: str = "INVALID_BUDGET_LINE"

    def __init__(self, reason: str, line_id: Any = None, concept: str | None = None):
        self.reason = reason
        self.line_id = line_id
        self.concept = concept
        label = concept or line_id or "<new>"
        super().__init__(f"Invalid budget line {label}: {reason}")


class BudgetNotFoundError(BudgetError):
    """Budget with given ID was not found."""

    code: str = "BUDGET_NOT_FOUND"

    def __init__(self, budget_id: Any):
        self.budget_id = budget_id
        super().__init__(f"Budget not found: {budget_id}")


class BudgetLineNotFoundError(BudgetError):
    """Budget line with given ID was not found."""

    code: str = "BUDGET_LINE_NOT_FOUND"

    def __init__(self, line_id: Any):
        self.line_id = line_id
        super().__init__(f"Budget line not found: {line_id}")


class BudgetNotEditableError(BudgetError):
    """Lines can only change while the budget is a draft."""

    code: str = "BUDGET_NOT_EDITABLE"

    def __init__(self, budget_id: Any, status: str):
        self.budget_id = budget_id
        self.status = status
        super().__init__(
            f"Budget {budget_id} is {status}; lines can only change in draft"
        )


class InvalidBudgetTransitionError(BudgetError):
    """Requested status change is not allowed by the budget lifecycle."""

    code: str = "INVALID_BUDGET_TRANSITION"

    def __init__(self, budget_id: Any, from_status: str, to_status: str):
        self.budget_id = budget_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Budget {budget_id} cannot move from {from_status} to {to_status}"
        )


# Projection exceptions


class ProjectionError(ParksFinanceError):
    """Base exception for multi-year projection errors."""

    code: str = "PROJECTION_ERROR"


class InvalidBaseSummaryError(ProjectionError):
    """The base annual summary fed to a projection is invalid."""

    code: str = "INVALID_BASE_SUMMARY"

    def __init__(self, field: str, value: Decimal):
        self.field = field
        self.value = value
        super().__init__(f"Base {field} cannot be negative: {value}")


class InvalidProjectionRequestError(ProjectionError):
    """Projection parameters are outside their valid range."""

    code: str = "INVALID_PROJECTION_REQUEST"

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid projection {parameter}={value}: {reason}")


# Config exceptions


class ConfigError(ParksFinanceError):
    """Base exception for analytics configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidConfigError(ConfigError):
    """Configuration file could not be parsed into a valid config."""

    code: str = "INVALID_CONFIG"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")
