"""
Budget module result types.

Frozen DTOs returned by ``CashFlowAnalyticsService`` that are specific to
the module rather than to any engine.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from parks_kernel.domain.budget import BudgetScope
from parks_kernel.domain.catalog import CategoryType
from parks_kernel.domain.values import round_currency, round_percent


@dataclass(frozen=True)
class DashboardSnapshot:
    """Realized income and expenses for one month and the year to date."""

    year: int
    month: int
    scope: BudgetScope
    currency: str
    month_income: Decimal
    month_expenses: Decimal
    ytd_income: Decimal
    ytd_expenses: Decimal

    @property
    def month_net(self) -> Decimal:
        return self.month_income - self.month_expenses

    @property
    def net_result(self) -> Decimal:
        return self.ytd_income - self.ytd_expenses

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "scope": self.scope.key,
            "currency": self.currency,
            "month_income": str(round_currency(self.month_income)),
            "month_expenses": str(round_currency(self.month_expenses)),
            "month_net": str(round_currency(self.month_net)),
            "ytd_income": str(round_currency(self.ytd_income)),
            "ytd_expenses": str(round_currency(self.ytd_expenses)),
            "net_result": str(round_currency(self.net_result)),
        }


@dataclass(frozen=True)
class VarianceAlert:
    """A category whose annual variance reached the alert threshold."""

    category_id: Hashable
    name: str
    category_type: CategoryType
    projected_total: Decimal
    real_total: Decimal
    variance_pct: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": str(self.category_id),
            "name": self.name,
            "type": self.category_type.value,
            "projected_total": str(round_currency(self.projected_total)),
            "real_total": str(round_currency(self.real_total)),
            "variance_pct": str(round_percent(self.variance_pct)),
        }
