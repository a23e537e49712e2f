"""
parks_engines.summary -- Monthly and annual rollups of the cash-flow matrix.

Responsibility:
    Roll matrix cells up into monthly and annual income/expense/net totals
    for the projected and the real series, plus the variance between them
    and the execution rate (real as a share of projected).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``CashFlowMatrix`` (or bare ``CashFlowCell`` lists plus a
    catalog); consumed by ProjectionEngine callers and the analytics service.

Invariants enforced:
    - Cells are partitioned by category type BEFORE summing.
    - net = income - expenses for each series, computed independently;
      ``AnnualSummary.net`` is a derived property, never stored.
    - Net variance is recomputed from projected and real net (never derived
      from the income/expense variances) and divides by abs(projected net).

Failure modes:
    - UnknownCategoryError when a bare cell's category is not in the catalog.
    - ValueError when bare cells are given without a catalog.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from parks_engines.cashflow_matrix import CashFlowCell, CashFlowMatrix
from parks_engines.tracer import traced_engine
from parks_engines.variance import net_variance_percent, variance_percent
from parks_kernel.domain.catalog import Category, CategoryCatalog, CategoryType
from parks_kernel.domain.ratio import Ratio
from parks_kernel.domain.values import (
    HUNDRED,
    ZERO,
    round_currency,
    round_percent,
    zero_vector,
)
from parks_kernel.logging_config import get_logger

logger = get_logger("engines.summary")


@dataclass(frozen=True)
class AnnualSummary:
    """Annual income, expenses and derived net for one series."""

    year: int | None
    income: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "income": str(round_currency(self.income)),
            "expenses": str(round_currency(self.expenses)),
            "net": str(round_currency(self.net)),
        }


@dataclass(frozen=True)
class MonthlySeries:
    """Twelve monthly income and expense totals with derived net."""

    income: tuple[Decimal, ...]
    expenses: tuple[Decimal, ...]

    @property
    def net(self) -> tuple[Decimal, ...]:
        return tuple(i - e for i, e in zip(self.income, self.expenses))

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "income": [str(round_currency(v)) for v in self.income],
            "expenses": [str(round_currency(v)) for v in self.expenses],
            "net": [str(round_currency(v)) for v in self.net],
        }


@dataclass(frozen=True)
class SeriesSummary:
    """Monthly and annual totals of one series (projected or real)."""

    monthly: MonthlySeries
    annual: AnnualSummary

    def to_dict(self) -> dict[str, Any]:
        return {"monthly": self.monthly.to_dict(), "annual": self.annual.to_dict()}


@dataclass(frozen=True)
class VarianceSummary:
    """Percentage variance of real against projected, monthly and annual."""

    monthly_income: tuple[Decimal, ...]
    monthly_expenses: tuple[Decimal, ...]
    monthly_net: tuple[Decimal, ...]
    annual_income: Decimal
    annual_expenses: Decimal
    annual_net: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly": {
                "income": [str(round_percent(v)) for v in self.monthly_income],
                "expenses": [str(round_percent(v)) for v in self.monthly_expenses],
                "net": [str(round_percent(v)) for v in self.monthly_net],
            },
            "annual": {
                "income": str(round_percent(self.annual_income)),
                "expenses": str(round_percent(self.annual_expenses)),
                "net": str(round_percent(self.annual_net)),
            },
        }


@dataclass(frozen=True)
class CashFlowSummary:
    """Projected, real and variance rollups for one matrix."""

    year: int | None
    projected: SeriesSummary
    real: SeriesSummary
    variance: VarianceSummary
    income_execution: Ratio
    expense_execution: Ratio

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "projected": self.projected.to_dict(),
            "real": self.real.to_dict(),
            "variance": self.variance.to_dict(),
            "execution": {
                "income": self.income_execution.to_dict(),
                "expenses": self.expense_execution.to_dict(),
            },
        }


def execution_ratio(projected: Decimal, real: Decimal) -> Ratio:
    """Real as a percentage of projected; undefined when nothing was planned."""
    if projected == ZERO:
        if real == ZERO:
            return Ratio.undefined("nothing projected or realized")
        return Ratio.unbounded("realized without projection")
    return Ratio.defined(real / projected * HUNDRED)


class SummaryAggregator:
    """
    Pure rollup of matrix cells.

    Contract:
        No I/O, fully deterministic, no mutation of the cells.
    Guarantees:
        - ``projected.annual.net == projected.annual.income - projected.annual.expenses``
          and likewise for the real series.
        - Monthly vectors always have 12 entries (zero when no cells).
    """

    @traced_engine("summary", "1.0", fingerprint_fields=("year",))
    def summarize(
        self,
        source: CashFlowMatrix | Iterable[CashFlowCell],
        year: int | None = None,
        categories: CategoryCatalog | Iterable[Category] | None = None,
    ) -> CashFlowSummary:
        """
        Summarize a matrix, or bare cells classified through ``categories``.

        Raises:
            ValueError: If bare cells are given without ``categories``.
            UnknownCategoryError: If a cell's category is not in ``categories``.
        """
        if isinstance(source, CashFlowMatrix):
            cells = source.cells
            types = source.category_types()
            if year is None:
                year = source.year
        else:
            if categories is None:
                raise ValueError("categories are required to summarize bare cells")
            cells = tuple(source)
            catalog = CategoryCatalog.coerce(categories)
            types = {
                cell.category_id: catalog.require(cell.category_id, source="cash-flow cell").type
                for cell in cells
            }

        logger.info("summary_started", extra={"year": year, "cell_count": len(cells)})

        projected = self._series(cells, types, real=False)
        real = self._series(cells, types, real=True)
        projected_annual = AnnualSummary(
            year, sum(projected.income, ZERO), sum(projected.expenses, ZERO)
        )
        real_annual = AnnualSummary(
            year, sum(real.income, ZERO), sum(real.expenses, ZERO)
        )

        variance = VarianceSummary(
            monthly_income=tuple(
                variance_percent(p, r) for p, r in zip(projected.income, real.income)
            ),
            monthly_expenses=tuple(
                variance_percent(p, r) for p, r in zip(projected.expenses, real.expenses)
            ),
            monthly_net=tuple(
                net_variance_percent(p, r) for p, r in zip(projected.net, real.net)
            ),
            annual_income=variance_percent(projected_annual.income, real_annual.income),
            annual_expenses=variance_percent(projected_annual.expenses, real_annual.expenses),
            annual_net=net_variance_percent(projected_annual.net, real_annual.net),
        )

        summary = CashFlowSummary(
            year=year,
            projected=SeriesSummary(projected, projected_annual),
            real=SeriesSummary(real, real_annual),
            variance=variance,
            income_execution=execution_ratio(projected_annual.income, real_annual.income),
            expense_execution=execution_ratio(projected_annual.expenses, real_annual.expenses),
        )
        logger.info("summary_completed", extra={
            "year": year,
            "projected_net": str(projected_annual.net),
            "real_net": str(real_annual.net),
        })
        return summary

    def _series(
        self,
        cells: tuple[CashFlowCell, ...],
        types: dict[Hashable, CategoryType],
        real: bool,
    ) -> MonthlySeries:
        income = zero_vector()
        expenses = zero_vector()
        for cell in cells:
            amount = cell.real if real else cell.projected
            target = income if types[cell.category_id] is CategoryType.INCOME else expenses
            target[cell.month - 1] += amount
        return MonthlySeries(tuple(income), tuple(expenses))
