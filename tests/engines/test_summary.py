"""
Tests for the summary aggregator.

Covers:
- Monthly and annual rollups for both series
- Independent net computation and its variance
- Execution ratios
- Bare cells classified through a catalog
"""

from decimal import Decimal

import pytest

from parks_engines.cashflow_matrix import CashFlowMatrixBuilder
from parks_engines.summary import SummaryAggregator, execution_ratio
from parks_kernel.domain.budget import ActualEntry, BudgetScope
from parks_kernel.domain.ratio import RatioKind
from parks_kernel.exceptions import UnknownCategoryError


@pytest.fixture
def matrix(parks_catalog, make_line):
    return CashFlowMatrixBuilder().build(
        year=2025,
        scope=BudgetScope.municipal(),
        categories=parks_catalog,
        budget_lines=[
            make_line("donations", "120000"),
            make_line("maintenance", "60000"),
        ],
        actuals=[
            ActualEntry(category_id="donations", month=1, year=2025, amount=Decimal("12000")),
            ActualEntry(category_id="maintenance", month=1, year=2025, amount=Decimal("6000")),
        ],
    )


class TestSummaryAggregator:

    def setup_method(self):
        self.aggregator = SummaryAggregator()

    def test_projected_series(self, matrix):
        summary = self.aggregator.summarize(matrix)

        assert summary.year == 2025
        assert summary.projected.monthly.income == (Decimal("10000"),) * 12
        assert summary.projected.monthly.expenses == (Decimal("5000"),) * 12
        assert summary.projected.monthly.net == (Decimal("5000"),) * 12
        assert summary.projected.annual.income == Decimal("120000")
        assert summary.projected.annual.expenses == Decimal("60000")
        assert summary.projected.annual.net == Decimal("60000")

    def test_real_series(self, matrix):
        summary = self.aggregator.summarize(matrix)

        assert summary.real.monthly.income[0] == Decimal("12000")
        assert summary.real.monthly.income[1] == Decimal("0")
        assert summary.real.annual.net == Decimal("6000")

    def test_variance(self, matrix):
        variance = self.aggregator.summarize(matrix).variance

        assert variance.monthly_income[0] == Decimal("20")
        assert variance.monthly_expenses[0] == Decimal("20")
        assert variance.monthly_net[0] == Decimal("20")
        assert variance.monthly_income[5] == Decimal("-100")
        assert variance.annual_income == Decimal("-90")
        assert variance.annual_net == Decimal("-90")

    def test_execution_ratios(self, matrix):
        summary = self.aggregator.summarize(matrix)
        assert summary.income_execution.value == Decimal("10")
        assert summary.expense_execution.value == Decimal("10")

    def test_bare_cells_with_catalog(self, matrix, parks_catalog):
        from_cells = self.aggregator.summarize(matrix.cells, year=2025, categories=parks_catalog)
        from_matrix = self.aggregator.summarize(matrix)
        assert from_cells == from_matrix

    def test_bare_cells_require_catalog(self, matrix):
        with pytest.raises(ValueError):
            self.aggregator.summarize(matrix.cells)

    def test_bare_cells_with_unknown_category(self, matrix):
        with pytest.raises(UnknownCategoryError):
            self.aggregator.summarize(matrix.cells, categories=[])

    def test_to_dict_rounds_for_presentation(self, matrix):
        data = self.aggregator.summarize(matrix).to_dict()
        assert data["projected"]["annual"]["net"] == "60000.00"
        assert data["variance"]["annual"]["income"] == "-90.00"
        assert data["execution"]["income"] == {"kind": "defined", "value": "10.00", "reason": None}


class TestDeficitNetVariance:

    def test_net_variance_uses_absolute_denominator(self, parks_catalog, make_line):
        """Planned deficit of 1000/month, realized deficit of 500 in January."""
        matrix = CashFlowMatrixBuilder().build(
            year=2025,
            scope=BudgetScope.municipal(),
            categories=parks_catalog,
            budget_lines=[make_line("donations", "12000"), make_line("payroll", "24000")],
            actuals=[
                ActualEntry(category_id="donations", month=1, year=2025, amount=Decimal("1500")),
                ActualEntry(category_id="payroll", month=1, year=2025, amount=Decimal("2000")),
            ],
        )
        summary = SummaryAggregator().summarize(matrix)

        assert summary.projected.monthly.net[0] == Decimal("-1000")
        assert summary.real.monthly.net[0] == Decimal("-500")
        assert summary.variance.monthly_net[0] == Decimal("50")


class TestExecutionRatio:

    def test_branches(self):
        assert execution_ratio(Decimal("0"), Decimal("0")).kind is RatioKind.UNDEFINED
        assert execution_ratio(Decimal("0"), Decimal("5")).kind is RatioKind.UNBOUNDED
        assert execution_ratio(Decimal("200"), Decimal("50")).value == Decimal("25")
