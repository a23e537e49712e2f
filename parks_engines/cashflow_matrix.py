"""
parks_engines.cashflow_matrix -- Projected vs real cash-flow matrix.

Responsibility:
    Merge budget-line projections with realized monthly actuals into a
    per-category, per-month matrix with a variance channel.  Each category
    row also carries its annual projected/real totals and annual variance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Imports parks_kernel.domain types and sibling engine modules only.
    Consumed by SummaryAggregator and CashFlowAnalyticsService.

Invariants enforced:
    - Pure: inputs are never mutated; identical inputs give identical output.
    - projected(c, m) >= 0 for every category and month (BudgetLine enforces
      non-negative amounts at construction).
    - A category's projected months sum to its lines' projected amounts.
    - Row order: income categories, then expense categories, each by name.

Failure modes:
    - UnknownCategoryError when an ActualEntry or a BudgetLine references a
      category absent from the catalog.  Never silently dropped.
    - Actual entries for a different year are outside the requested window;
      they are skipped and logged, not treated as errors.

Usage:
    from parks_engines.cashflow_matrix import CashFlowMatrixBuilder

    matrix = CashFlowMatrixBuilder().build(
        year=2025,
        scope=BudgetScope.municipal(),
        categories=catalog,
        budget_lines=lines,
        actuals=actuals,
    )
    matrix.cell(donations.id, 1).variance_pct
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from parks_engines.tracer import traced_engine
from parks_engines.variance import variance_percent
from parks_kernel.domain.budget import ActualEntry, BudgetLine, BudgetScope
from parks_kernel.domain.catalog import Category, CategoryCatalog, CategoryType
from parks_kernel.domain.values import (
    MONTHS,
    ZERO,
    round_currency,
    round_percent,
    zero_vector,
)
from parks_kernel.exceptions import UnknownCategoryError
from parks_kernel.logging_config import get_logger

logger = get_logger("engines.cashflow_matrix")


@dataclass(frozen=True)
class CashFlowCell:
    """One (category, month) cell of the matrix."""

    category_id: Hashable
    month: int
    projected: Decimal
    real: Decimal
    variance_pct: Decimal


@dataclass(frozen=True)
class CategoryCashFlow:
    """A matrix row: one category's projected, real and variance vectors."""

    category: Category
    projected: tuple[Decimal, ...]
    real: tuple[Decimal, ...]
    variance_pct: tuple[Decimal, ...]

    @property
    def category_id(self) -> Hashable:
        return self.category.id

    @property
    def category_type(self) -> CategoryType:
        return self.category.type

    @property
    def projected_total(self) -> Decimal:
        return sum(self.projected, ZERO)

    @property
    def real_total(self) -> Decimal:
        return sum(self.real, ZERO)

    @property
    def total_variance_pct(self) -> Decimal:
        return variance_percent(self.projected_total, self.real_total)

    def cells(self) -> tuple[CashFlowCell, ...]:
        return tuple(
            CashFlowCell(
                category_id=self.category.id,
                month=month,
                projected=self.projected[month - 1],
                real=self.real[month - 1],
                variance_pct=self.variance_pct[month - 1],
            )
            for month in MONTHS
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": str(self.category.id),
            "name": self.category.name,
            "type": self.category.type.value,
            "projected": [str(round_currency(v)) for v in self.projected],
            "real": [str(round_currency(v)) for v in self.real],
            "variance_pct": [str(round_percent(v)) for v in self.variance_pct],
            "projected_total": str(round_currency(self.projected_total)),
            "real_total": str(round_currency(self.real_total)),
            "total_variance_pct": str(round_percent(self.total_variance_pct)),
        }


@dataclass(frozen=True)
class CashFlowMatrix:
    """The reconciled matrix for one (year, scope)."""

    year: int
    scope: BudgetScope
    rows: tuple[CategoryCashFlow, ...]

    @property
    def cells(self) -> tuple[CashFlowCell, ...]:
        """Flat cell list, 12 per row, in row order."""
        return tuple(cell for row in self.rows for cell in row.cells())

    def by_category(self) -> dict[Hashable, CategoryCashFlow]:
        return {row.category_id: row for row in self.rows}

    def rows_of_type(self, category_type: CategoryType) -> tuple[CategoryCashFlow, ...]:
        return tuple(row for row in self.rows if row.category_type is category_type)

    def category_types(self) -> dict[Hashable, CategoryType]:
        return {row.category_id: row.category_type for row in self.rows}

    def cell(self, category_id: Hashable, month: int) -> CashFlowCell:
        row = self.by_category()[category_id]
        return row.cells()[month - 1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "scope": self.scope.key,
            "categories": [row.to_dict() for row in self.rows],
        }


class CashFlowMatrixBuilder:
    """
    Pure builder for the projected-versus-real matrix.

    Contract:
        No I/O, no database access, fully deterministic.
        All reference data passed as parameters.
    Guarantees:
        - One row per catalog category that is active or carries data.
        - Missing actual months default to 0.
        - Several lines (or actual entries) for the same category and month
          are summed.
    Non-goals:
        - Does not fetch categories, lines or actuals (the service does).
        - Does not round; rounding happens in ``to_dict``.
    """

    @traced_engine(
        "cashflow_matrix", "1.0",
        fingerprint_fields=("year", "scope", "budget_lines", "actuals"),
    )
    def build(
        self,
        year: int,
        scope: BudgetScope,
        categories: CategoryCatalog | Iterable[Category],
        budget_lines: Iterable[BudgetLine],
        actuals: Iterable[ActualEntry],
    ) -> CashFlowMatrix:
        """
        Build the matrix for ``year`` and ``scope``.

        Raises:
            UnknownCategoryError: If a line or an actual entry references a
                category that is not in ``categories``.
        """
        catalog = CategoryCatalog.coerce(categories)
        lines = tuple(budget_lines)
        entries = tuple(actuals)

        logger.info("cashflow_matrix_build_started", extra={
            "year": year,
            "scope": scope.key,
            "category_count": len(catalog),
            "line_count": len(lines),
            "actual_count": len(entries),
        })

        projected = self._projected_vectors(catalog, lines)
        real = self._real_vectors(catalog, entries, year)

        rows: list[CategoryCashFlow] = []
        for category in catalog:
            has_data = category.id in projected or category.id in real
            if not category.active and not has_data:
                continue
            projected_vector = tuple(projected.get(category.id, zero_vector()))
            real_vector = tuple(real.get(category.id, zero_vector()))
            rows.append(
                CategoryCashFlow(
                    category=category,
                    projected=projected_vector,
                    real=real_vector,
                    variance_pct=tuple(
                        variance_percent(p, r)
                        for p, r in zip(projected_vector, real_vector)
                    ),
                )
            )

        matrix = CashFlowMatrix(year=year, scope=scope, rows=tuple(rows))
        logger.info("cashflow_matrix_built", extra={
            "year": year,
            "scope": scope.key,
            "row_count": len(rows),
        })
        return matrix

    def _projected_vectors(
        self,
        catalog: CategoryCatalog,
        lines: tuple[BudgetLine, ...],
    ) -> dict[Hashable, list[Decimal]]:
        vectors: dict[Hashable, list[Decimal]] = {}
        for line in lines:
            catalog.require(line.category_id, source="budget line")
            vector = vectors.setdefault(line.category_id, zero_vector())
            for index, amount in enumerate(line.monthly_vector()):
                vector[index] += amount
        return vectors

    def _real_vectors(
        self,
        catalog: CategoryCatalog,
        entries: tuple[ActualEntry, ...],
        year: int,
    ) -> dict[Hashable, list[Decimal]]:
        vectors: dict[Hashable, list[Decimal]] = {}
        skipped = 0
        for entry in entries:
            if not catalog.contains(entry.category_id):
                logger.error("cashflow_matrix_unknown_category", extra={
                    "category_id": str(entry.category_id),
                    "month": entry.month,
                    "year": entry.year,
                })
                raise UnknownCategoryError(entry.category_id, source="actual entry")
            if entry.year != year:
                skipped += 1
                continue
            vector = vectors.setdefault(entry.category_id, zero_vector())
            vector[entry.month - 1] += entry.amount
        if skipped:
            logger.warning("cashflow_matrix_actuals_out_of_year", extra={
                "year": year,
                "skipped_count": skipped,
            })
        return vectors

