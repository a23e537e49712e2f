"""
Tests for budget analytics.

Covers:
- Profit margin and income/expense ratio, including every zero branch
- Recommendation rules and overall severity
- Category share distributions
"""

from decimal import Decimal

import pytest

from parks_engines.budget_analytics import (
    AnalyticsThresholds,
    BudgetAnalytics,
    Severity,
    income_to_expense_ratio,
    profit_margin,
)
from parks_kernel.domain.budget import Budget
from parks_kernel.domain.ratio import RatioKind
from parks_kernel.exceptions import UnknownCategoryError


def _codes(analysis):
    return [r.code for r in analysis.recommendations]


class TestRatios:

    def test_profit_margin_defined(self):
        margin = profit_margin(Decimal("200"), Decimal("150"))
        assert margin.kind is RatioKind.DEFINED
        assert margin.value == Decimal("25")

    def test_profit_margin_expenses_without_income(self):
        assert profit_margin(Decimal("0"), Decimal("10")).kind is RatioKind.NEGATIVE_UNBOUNDED

    def test_profit_margin_both_zero(self):
        margin = profit_margin(Decimal("0"), Decimal("0"))
        assert margin.kind is RatioKind.DEFINED
        assert margin.value == Decimal("0")

    def test_income_expense_ratio_defined(self):
        assert income_to_expense_ratio(Decimal("150"), Decimal("100")).value == Decimal("1.5")

    def test_income_expense_ratio_income_without_expenses(self):
        assert income_to_expense_ratio(Decimal("5"), Decimal("0")).kind is RatioKind.UNBOUNDED

    def test_income_expense_ratio_both_zero(self):
        ratio = income_to_expense_ratio(Decimal("0"), Decimal("0"))
        assert ratio.kind is RatioKind.DEFINED
        assert ratio.value == Decimal("0")


class TestRecommendations:

    def setup_method(self):
        self.analytics = BudgetAnalytics()

    def _analyze(self, income, expenses):
        return self.analytics.analyze(Decimal(income), Decimal(expenses), [], [])

    def test_empty_budget(self):
        """A budget with no lines has a zero margin and a tight-margin warning."""
        analysis = self._analyze("0", "0")

        assert analysis.profit_margin_pct.value == Decimal("0")
        assert analysis.income_to_expense_ratio.value == Decimal("0")
        assert _codes(analysis) == ["tight_margin", "diversification"]
        assert analysis.overall_severity is Severity.MEDIUM
        assert analysis.income_by_category == ()
        assert analysis.expense_by_category == ()

    def test_deficit(self):
        analysis = self._analyze("100", "120")
        assert _codes(analysis) == ["deficit", "diversification"]
        assert analysis.overall_severity is Severity.HIGH

    def test_expenses_without_income_is_deficit(self):
        analysis = self._analyze("0", "50")
        assert analysis.profit_margin_pct.kind is RatioKind.NEGATIVE_UNBOUNDED
        assert _codes(analysis)[0] == "deficit"

    def test_tight_margin(self):
        assert _codes(self._analyze("100", "97")) == ["tight_margin", "diversification"]

    def test_between_tight_and_healthy_only_diversifies(self):
        analysis = self._analyze("100", "93")
        assert _codes(analysis) == ["diversification"]
        assert analysis.overall_severity is Severity.INFO

    def test_healthy(self):
        assert _codes(self._analyze("100", "90")) == ["healthy", "diversification"]

    def test_income_without_expenses_is_healthy(self):
        analysis = self._analyze("100", "0")
        assert analysis.income_to_expense_ratio.kind is RatioKind.UNBOUNDED
        assert _codes(analysis)[0] == "healthy"

    def test_custom_thresholds(self):
        analytics = BudgetAnalytics(AnalyticsThresholds(
            deficit_below="0", tight_margin_below="8", healthy_at_least="20",
        ))
        analysis = analytics.analyze(Decimal("100"), Decimal("93"), [], [])
        assert _codes(analysis) == ["tight_margin", "diversification"]

    def test_misordered_thresholds_rejected(self):
        with pytest.raises(ValueError):
            AnalyticsThresholds(deficit_below="5", tight_margin_below="1", healthy_at_least="10")


class TestDistribution:

    def test_shares_grouped_by_name_and_sorted(self, parks_catalog, make_line):
        analysis = BudgetAnalytics().analyze(
            Decimal("1000"),
            Decimal("400"),
            income_lines=[
                make_line("concessions", "250"),
                make_line("donations", "500"),
                make_line("concessions", "250"),
            ],
            expense_lines=[make_line("payroll", "300"), make_line("maintenance", "100")],
            categories=parks_catalog,
        )

        income = [(s.name, s.amount, s.share_pct) for s in analysis.income_by_category]
        assert income == [
            ("Concessions", Decimal("500"), Decimal("50")),
            ("Donations", Decimal("500"), Decimal("50")),
        ]
        assert [s.name for s in analysis.expense_by_category] == ["Payroll", "Maintenance"]
        assert analysis.expense_by_category[0].share_pct == Decimal("75")

    def test_grouped_by_id_without_catalog(self, make_line):
        analysis = BudgetAnalytics().analyze(
            Decimal("0"), Decimal("0"), [make_line("donations", "0")], [],
        )
        share = analysis.income_by_category[0]
        assert share.name == "donations"
        assert share.share_pct == Decimal("0")

    def test_analyze_budget_partitions_lines(self, parks_catalog, make_line):
        budget = Budget(
            id="b-1", name="2025", year=2025,
            total_income=Decimal("1000"), total_expenses=Decimal("800"),
        )
        lines = [make_line("donations", "1000"), make_line("payroll", "800")]

        analysis = BudgetAnalytics().analyze_budget(budget, lines, parks_catalog)

        assert analysis.net == Decimal("200")
        assert analysis.profit_margin_pct.value == Decimal("20")
        assert [s.name for s in analysis.income_by_category] == ["Donations"]
        assert [s.name for s in analysis.expense_by_category] == ["Payroll"]
        assert _codes(analysis) == ["healthy", "diversification"]

    def test_analyze_budget_unknown_category(self, parks_catalog, make_line):
        budget = Budget(id="b-1", name="2025", year=2025)
        with pytest.raises(UnknownCategoryError):
            BudgetAnalytics().analyze_budget(budget, [make_line("ghost", "1")], parks_catalog)

    def test_to_dict(self, parks_catalog, make_line):
        data = BudgetAnalytics().analyze(
            Decimal("1000"), Decimal("400"),
            [make_line("donations", "1000")], [make_line("payroll", "400")],
            categories=parks_catalog,
        ).to_dict()

        assert data["net"] == "600.00"
        assert data["profit_margin_pct"]["value"] == "60.00"
        assert data["income_by_category"] == [
            {"name": "Donations", "amount": "1000.00", "share_pct": "100.00"},
        ]
        assert data["overall_severity"] == "info"
