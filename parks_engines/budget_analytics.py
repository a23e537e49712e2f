"""
parks_engines.budget_analytics -- Ratios, category shares and recommendations.

Responsibility:
    Derive the profit margin, the income/expense ratio, per-category share
    distributions and rule-based recommendations from a single budget's
    totals and lines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes BudgetLine and CategoryCatalog; thresholds are supplied by the
    caller (from ``parks_config``), never read here.

Invariants enforced:
    - Every zero-denominator case yields a ``Ratio`` state, never NaN or
      Infinity:
        profit margin      income > 0 -> defined
                           income == 0, expenses > 0 -> negative unbounded
                           income == 0, expenses == 0 -> defined 0
        income/expense     expenses > 0 -> defined
                           expenses == 0, income > 0 -> unbounded
                           expenses == 0, income == 0 -> defined 0
    - Category shares are 0 when the respective total is 0.
    - Recommendations are ordered; the first governs overall severity and
      the diversification note is always last.

Failure modes:
    - UnknownCategoryError when a line's category is not in the catalog.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from parks_engines.tracer import traced_engine
from parks_kernel.domain.budget import Budget, BudgetLine, split_lines
from parks_kernel.domain.catalog import Category, CategoryCatalog
from parks_kernel.domain.ratio import Ratio
from parks_kernel.domain.values import (
    HUNDRED,
    ZERO,
    round_currency,
    round_percent,
    to_decimal,
)
from parks_kernel.logging_config import get_logger

logger = get_logger("engines.budget_analytics")


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    INFO = "info"


@dataclass(frozen=True)
class Recommendation:
    """An advisory message with a severity tag."""

    code: str
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class CategoryShare:
    """One category's summed projected amount and share of its total."""

    name: str
    amount: Decimal
    share_pct: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "amount": str(round_currency(self.amount)),
            "share_pct": str(round_percent(self.share_pct)),
        }


@dataclass(frozen=True)
class AnalyticsThresholds:
    """Profit-margin cut-offs, in percent, for the recommendation rules."""

    deficit_below: Decimal = Decimal("0")
    tight_margin_below: Decimal = Decimal("5")
    healthy_at_least: Decimal = Decimal("10")

    def __post_init__(self) -> None:
        for name in ("deficit_below", "tight_margin_below", "healthy_at_least"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if not self.deficit_below <= self.tight_margin_below <= self.healthy_at_least:
            raise ValueError(
                "thresholds must satisfy deficit_below <= tight_margin_below "
                "<= healthy_at_least"
            )


@dataclass(frozen=True)
class BudgetAnalysis:
    """Result of analyzing one budget."""

    total_income: Decimal
    total_expenses: Decimal
    profit_margin_pct: Ratio
    income_to_expense_ratio: Ratio
    income_by_category: tuple[CategoryShare, ...]
    expense_by_category: tuple[CategoryShare, ...]
    recommendations: tuple[Recommendation, ...] = field(default_factory=tuple)

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def overall_severity(self) -> Severity:
        if not self.recommendations:
            return Severity.INFO
        return self.recommendations[0].severity

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_income": str(round_currency(self.total_income)),
            "total_expenses": str(round_currency(self.total_expenses)),
            "net": str(round_currency(self.net)),
            "profit_margin_pct": self.profit_margin_pct.to_dict(),
            "income_to_expense_ratio": self.income_to_expense_ratio.to_dict(),
            "income_by_category": [s.to_dict() for s in self.income_by_category],
            "expense_by_category": [s.to_dict() for s in self.expense_by_category],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "overall_severity": self.overall_severity.value,
        }


def profit_margin(total_income: Decimal, total_expenses: Decimal) -> Ratio:
    """(income - expenses) / income * 100."""
    if total_income > ZERO:
        return Ratio.defined((total_income - total_expenses) / total_income * HUNDRED)
    if total_expenses > ZERO:
        return Ratio.negative_unbounded("expenses without income")
    return Ratio.defined(ZERO)


def income_to_expense_ratio(total_income: Decimal, total_expenses: Decimal) -> Ratio:
    """income / expenses."""
    if total_expenses > ZERO:
        return Ratio.defined(total_income / total_expenses)
    if total_income > ZERO:
        return Ratio.unbounded("income without expenses")
    return Ratio.defined(ZERO)


class BudgetAnalytics:
    """
    Pure analysis of one budget's totals and lines.

    Contract:
        No I/O, deterministic, inputs never mutated.
    Guarantees:
        - Distributions are sorted by amount descending, then name.
        - At least one recommendation (the diversification note).
    Non-goals:
        - Does not check that the totals equal the line sums; the service
          recomputes totals before calling.
    """

    def __init__(self, thresholds: AnalyticsThresholds | None = None):
        self.thresholds = thresholds or AnalyticsThresholds()

    @traced_engine(
        "budget_analytics", "1.0",
        fingerprint_fields=("total_income", "total_expenses"),
    )
    def analyze(
        self,
        total_income: Decimal,
        total_expenses: Decimal,
        income_lines: Iterable[BudgetLine],
        expense_lines: Iterable[BudgetLine],
        categories: CategoryCatalog | Iterable[Category] | None = None,
    ) -> BudgetAnalysis:
        """
        Analyze a budget from its totals and its partitioned lines.

        ``categories`` supplies the display names lines are grouped by;
        without it lines are grouped by category id.
        """
        total_income = to_decimal(total_income)
        total_expenses = to_decimal(total_expenses)
        catalog = None if categories is None else CategoryCatalog.coerce(categories)
        income_lines = tuple(income_lines)
        expense_lines = tuple(expense_lines)

        logger.info("budget_analytics_started", extra={
            "total_income": str(total_income),
            "total_expenses": str(total_expenses),
            "income_line_count": len(income_lines),
            "expense_line_count": len(expense_lines),
        })

        margin = profit_margin(total_income, total_expenses)
        analysis = BudgetAnalysis(
            total_income=total_income,
            total_expenses=total_expenses,
            profit_margin_pct=margin,
            income_to_expense_ratio=income_to_expense_ratio(total_income, total_expenses),
            income_by_category=self._distribution(income_lines, total_income, catalog),
            expense_by_category=self._distribution(expense_lines, total_expenses, catalog),
            recommendations=self._recommendations(margin),
        )

        logger.info("budget_analytics_completed", extra={
            "profit_margin_kind": margin.kind.value,
            "overall_severity": analysis.overall_severity.value,
            "recommendation_count": len(analysis.recommendations),
        })
        return analysis

    def analyze_budget(
        self,
        budget: Budget,
        lines: Sequence[BudgetLine],
        catalog: CategoryCatalog,
    ) -> BudgetAnalysis:
        """Partition ``lines`` by category type and analyze with the budget's totals."""
        income_lines, expense_lines = split_lines(lines, catalog)
        return self.analyze(
            budget.total_income,
            budget.total_expenses,
            income_lines,
            expense_lines,
            categories=catalog,
        )

    def _distribution(
        self,
        lines: tuple[BudgetLine, ...],
        total: Decimal,
        catalog: CategoryCatalog | None,
    ) -> tuple[CategoryShare, ...]:
        amounts: dict[str, Decimal] = {}
        for line in lines:
            name = self._category_name(line.category_id, catalog)
            amounts[name] = amounts.get(name, ZERO) + line.projected_amount
        shares = [
            CategoryShare(
                name=name,
                amount=amount,
                share_pct=amount / total * HUNDRED if total > ZERO else ZERO,
            )
            for name, amount in amounts.items()
        ]
        shares.sort(key=lambda s: (-s.amount, s.name))
        return tuple(shares)

    @staticmethod
    def _category_name(category_id: Hashable, catalog: CategoryCatalog | None) -> str:
        if catalog is None:
            return str(category_id)
        return catalog.require(category_id, source="budget line").name

    def _recommendations(self, margin: Ratio) -> tuple[Recommendation, ...]:
        t = self.thresholds
        recommendations: list[Recommendation] = []

        if margin.below(t.deficit_below):
            recommendations.append(Recommendation(
                code="deficit",
                severity=Severity.HIGH,
                message=(
                    "Projected expenses exceed income. Review expense lines "
                    "or identify additional income before approval."
                ),
            ))
        elif margin.below(t.tight_margin_below):
            recommendations.append(Recommendation(
                code="tight_margin",
                severity=Severity.MEDIUM,
                message=(
                    f"Profit margin is below {t.tight_margin_below}%. Keep a "
                    "contingency reserve for unplanned maintenance."
                ),
            ))
        elif margin.at_least(t.healthy_at_least):
            recommendations.append(Recommendation(
                code="healthy",
                severity=Severity.INFO,
                message=(
                    "The budget shows a healthy margin. Consider reinvesting "
                    "the surplus in park improvements."
                ),
            ))

        recommendations.append(Recommendation(
            code="diversification",
            severity=Severity.INFO,
            message=(
                "Diversify income sources (concessions, events, sponsorships) "
                "to reduce dependence on any single category."
            ),
        ))
        return tuple(recommendations)
