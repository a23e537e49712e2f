"""
Pure domain layer.

Data definitions and helpers with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from parks_kernel.domain.budget import (
    ActualEntry,
    Budget,
    BudgetLine,
    BudgetScope,
    BudgetStatus,
    compute_totals,
    split_lines,
)
from parks_kernel.domain.catalog import (
    Category,
    CategoryCatalog,
    CategoryTree,
    CategoryType,
)
from parks_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from parks_kernel.domain.ratio import Ratio, RatioKind

__all__ = [
    "ActualEntry",
    "Budget",
    "BudgetLine",
    "BudgetScope",
    "BudgetStatus",
    "compute_totals",
    "split_lines",
    "Category",
    "CategoryCatalog",
    "CategoryTree",
    "CategoryType",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Ratio",
    "RatioKind",
]
