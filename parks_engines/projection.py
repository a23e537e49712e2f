"""
parks_engines.projection -- Multi-year income/expense/net projections.

Responsibility:
    Extrapolate N future years from a base annual summary under a named
    growth scenario and an inflation rate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``AnnualSummary`` from SummaryAggregator.

Invariants enforced:
    - Closed form, Decimal arithmetic, no iteration or randomness:
        income_i   = base_income   * (1 + growth + inflation) ** i
        expenses_i = base_expenses * (1 + inflation) ** i
        net_i      = income_i - expenses_i
      Income grows by scenario growth plus inflation; expenses grow by
      inflation alone.  That asymmetry produces margin expansion or
      compression across the horizon and is preserved on purpose.
    - Zero bases stay zero for every year.
    - Bit-reproducible for identical inputs.

Failure modes:
    - InvalidBaseSummaryError for negative base income or expenses.
    - InvalidProjectionRequestError for a negative horizon, an inflation
      rate at or below -100 %, or a combined income factor at or below 0.

Usage:
    from parks_engines.projection import ProjectionEngine, Scenario

    projections = ProjectionEngine().project(
        base=AnnualSummary(2025, Decimal("1000000"), Decimal("800000")),
        scenario=Scenario.REALISTIC,
        inflation_rate_pct=Decimal("3.5"),
        years=1,
    )
    projections[0].income  # Decimal("1115000.000")
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from parks_engines.summary import AnnualSummary
from parks_engines.tracer import traced_engine
from parks_kernel.domain.values import (
    HUNDRED,
    ONE,
    ZERO,
    round_currency,
    to_decimal,
)
from parks_kernel.exceptions import (
    InvalidBaseSummaryError,
    InvalidProjectionRequestError,
)
from parks_kernel.logging_config import get_logger

logger = get_logger("engines.projection")

DEFAULT_HORIZON_YEARS = 3


class Scenario(str, Enum):
    """Named income growth assumption."""

    OPTIMISTIC = "optimistic"
    REALISTIC = "realistic"
    PESSIMISTIC = "pessimistic"


# Annual income growth, in percent, per scenario
DEFAULT_SCENARIO_GROWTH_PCT: Mapping[Scenario, Decimal] = MappingProxyType({
    Scenario.OPTIMISTIC: Decimal("15"),
    Scenario.REALISTIC: Decimal("8"),
    Scenario.PESSIMISTIC: Decimal("-5"),
})


@dataclass(frozen=True)
class Projection:
    """One projected future year."""

    year: int | None
    income: Decimal
    expenses: Decimal
    scenario: Scenario
    inflation_rate: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "income": str(round_currency(self.income)),
            "expenses": str(round_currency(self.expenses)),
            "net": str(round_currency(self.net)),
            "scenario": self.scenario.value,
            "inflation_rate": str(self.inflation_rate),
        }


class ProjectionEngine:
    """
    Closed-form compounding of a base annual summary.

    Contract:
        No I/O, fully deterministic.  Scenario growth rates are a fixed
        lookup, overridable at construction (from configuration).
    Guarantees:
        - ``len(result) == years``; ``years == 0`` gives an empty list.
        - Projection ``i`` carries year ``base.year + i`` when the base has
          a year.
    """

    def __init__(self, scenario_growth_pct: Mapping[Scenario, Decimal] | None = None):
        rates = dict(DEFAULT_SCENARIO_GROWTH_PCT)
        if scenario_growth_pct:
            rates.update(
                {Scenario(k): to_decimal(v) for k, v in scenario_growth_pct.items()}
            )
        self._growth_pct: Mapping[Scenario, Decimal] = MappingProxyType(rates)

    @property
    def scenario_growth_pct(self) -> Mapping[Scenario, Decimal]:
        return self._growth_pct

    def growth_rate(self, scenario: Scenario | str) -> Decimal:
        """Annual income growth for a scenario, as a fraction."""
        return self._growth_pct[Scenario(scenario)] / HUNDRED

    @traced_engine(
        "projection", "1.0",
        fingerprint_fields=("base", "scenario", "inflation_rate_pct", "years"),
    )
    def project(
        self,
        base: AnnualSummary,
        scenario: Scenario | str,
        inflation_rate_pct: Decimal,
        years: int = DEFAULT_HORIZON_YEARS,
    ) -> list[Projection]:
        """
        Project ``years`` future years from ``base``.

        Args:
            base: Base-year annual summary (typically the projected series).
            scenario: Growth scenario applied to income.
            inflation_rate_pct: Annual inflation in percent (3.5 means 3.5 %).
            years: Horizon length.

        Raises:
            InvalidBaseSummaryError: Negative base income or expenses.
            InvalidProjectionRequestError: Negative horizon or rates that
                would make a compounding factor non-positive.
        """
        scenario = Scenario(scenario)
        inflation_pct = to_decimal(inflation_rate_pct)

        logger.info("projection_started", extra={
            "base_year": base.year,
            "scenario": scenario.value,
            "inflation_rate_pct": str(inflation_pct),
            "years": years,
        })

        self._validate(base, inflation_pct, years, scenario)

        inflation = inflation_pct / HUNDRED
        income_factor = ONE + self.growth_rate(scenario) + inflation
        expense_factor = ONE + inflation

        projections = [
            Projection(
                year=None if base.year is None else base.year + i,
                income=self._compound(base.income, income_factor, i),
                expenses=self._compound(base.expenses, expense_factor, i),
                scenario=scenario,
                inflation_rate=inflation_pct,
            )
            for i in range(1, years + 1)
        ]

        logger.info("projection_completed", extra={
            "scenario": scenario.value,
            "years": years,
            "final_net": str(projections[-1].net) if projections else None,
        })
        return projections

    def project_all_scenarios(
        self,
        base: AnnualSummary,
        inflation_rate_pct: Decimal,
        years: int = DEFAULT_HORIZON_YEARS,
    ) -> dict[Scenario, list[Projection]]:
        """Every scenario side by side, in declaration order."""
        return {
            scenario: self.project(
                base=base,
                scenario=scenario,
                inflation_rate_pct=inflation_rate_pct,
                years=years,
            )
            for scenario in Scenario
        }

    @staticmethod
    def _compound(amount: Decimal, factor: Decimal, exponent: int) -> Decimal:
        if amount == ZERO:
            return ZERO
        return amount * factor ** exponent

    def _validate(
        self,
        base: AnnualSummary,
        inflation_pct: Decimal,
        years: int,
        scenario: Scenario,
    ) -> None:
        if base.income < ZERO:
            logger.error("projection_invalid_base", extra={"field": "income"})
            raise InvalidBaseSummaryError("income", base.income)
        if base.expenses < ZERO:
            logger.error("projection_invalid_base", extra={"field": "expenses"})
            raise InvalidBaseSummaryError("expenses", base.expenses)
        if isinstance(years, bool) or not isinstance(years, int):
            raise InvalidProjectionRequestError("years", years, "must be an integer")
        if years < 0:
            raise InvalidProjectionRequestError("years", years, "cannot be negative")
        if inflation_pct <= -HUNDRED:
            raise InvalidProjectionRequestError(
                "inflation_rate_pct", inflation_pct, "must be above -100"
            )
        if self._growth_pct[scenario] + inflation_pct <= -HUNDRED:
            raise InvalidProjectionRequestError(
                "inflation_rate_pct", inflation_pct,
                f"combined with {scenario.value} growth the income factor is not positive",
            )
