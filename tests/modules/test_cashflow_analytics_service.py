"""
Tests for CashFlowAnalyticsService.

Covers:
- Matrix and summary built from persisted budgets and actuals
- Dashboard snapshot and variance alerts
- Projection and scenario comparison from the budget's projected totals
- Budget analytics with totals recomputed from the lines
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from parks_engines.projection import Scenario
from parks_kernel.domain.budget import BudgetScope
from parks_kernel.domain.catalog import CategoryType
from parks_kernel.exceptions import BudgetNotFoundError
from parks_modules.budget import CashFlowAnalyticsService
from parks_modules.budget.config import BudgetModuleConfig
from parks_modules.budget.orm import BudgetModel


@pytest.fixture
def january_actuals(budget_service, park_categories, actor_id):
    budget_service.record_actual(
        park_categories["donations"].id, 2025, 1, Decimal("12000"), actor_id,
    )
    budget_service.record_actual(
        park_categories["maintenance"].id, 2025, 1, Decimal("6000"), actor_id,
    )


class TestCashFlowMatrix:

    def test_matrix_from_governing_budget(
        self, analytics_service, municipal_budget, park_categories, january_actuals,
    ):
        matrix = analytics_service.cash_flow_matrix(2025)

        assert [row.category.name for row in matrix.rows] == [
            "Concessions", "Donations", "Maintenance", "Payroll",
        ]
        cell = matrix.cell(park_categories["donations"].id, 1)
        assert cell.projected == Decimal("10000")
        assert cell.real == Decimal("12000")
        assert cell.variance_pct == Decimal("20")
        assert matrix.cell(park_categories["donations"].id, 2).variance_pct == Decimal("-100")

    def test_no_budget_projects_zero(
        self, analytics_service, park_categories, january_actuals, captured_logs,
    ):
        matrix = analytics_service.cash_flow_matrix(2025)

        donations = matrix.by_category()[park_categories["donations"].id]
        assert donations.projected_total == Decimal("0")
        assert donations.real_total == Decimal("12000")
        assert matrix.cell(park_categories["donations"].id, 1).variance_pct == Decimal("100")
        assert any(r["message"] == "cashflow_no_budget" for r in captured_logs())

    def test_scope_isolation(
        self, analytics_service, budget_service, municipal_budget, park_categories,
        actor_id, park_scope,
    ):
        budget_service.record_actual(
            park_categories["donations"].id, 2025, 1, Decimal("500"), actor_id, scope=park_scope,
        )

        municipal = analytics_service.cash_flow_matrix(2025)
        park = analytics_service.cash_flow_matrix(2025, park_scope)

        assert municipal.by_category()[park_categories["donations"].id].real_total == 0
        park_row = park.by_category()[park_categories["donations"].id]
        assert park_row.real_total == Decimal("500")
        assert park_row.projected_total == 0

    def test_inactive_category_without_data_is_omitted(
        self, analytics_service, budget_service, municipal_budget, park_categories, actor_id,
    ):
        budget_service.set_category_active(park_categories["concessions"].id, False, actor_id)
        budget_service.set_category_active(park_categories["donations"].id, False, actor_id)

        names = [row.category.name for row in analytics_service.cash_flow_matrix(2025).rows]

        assert "Concessions" not in names
        assert "Donations" in names


class TestSummaryAndDashboard:

    def test_summary(self, analytics_service, municipal_budget, january_actuals):
        summary = analytics_service.cash_flow_summary(2025)

        assert summary.projected.annual.income == Decimal("120000")
        assert summary.projected.annual.net == Decimal("60000")
        assert summary.real.annual.net == Decimal("6000")
        assert summary.variance.annual_income == Decimal("-90")
        assert summary.income_execution.value == Decimal("10")

    def test_dashboard_snapshot(
        self, analytics_service, budget_service, municipal_budget, park_categories,
        january_actuals, actor_id,
    ):
        budget_service.record_actual(
            park_categories["payroll"].id, 2025, 2, Decimal("2500"), actor_id,
        )

        snapshot = analytics_service.dashboard_snapshot(2025, 2)

        assert snapshot.currency == "MXN"
        assert snapshot.month_income == Decimal("0")
        assert snapshot.month_expenses == Decimal("2500")
        assert snapshot.ytd_income == Decimal("12000")
        assert snapshot.ytd_expenses == Decimal("8500")
        assert snapshot.net_result == Decimal("3500")
        assert snapshot.to_dict()["month_net"] == "-2500.00"

    def test_dashboard_rejects_bad_month(self, analytics_service):
        with pytest.raises(ValueError):
            analytics_service.dashboard_snapshot(2025, 0)

    def test_dashboard_currency_from_module_config(self, session, analytics_config):
        service = CashFlowAnalyticsService(
            session, config=analytics_config,
            module_config=BudgetModuleConfig(default_currency="USD"),
        )
        assert service.dashboard_snapshot(2025, 1).currency == "USD"


class TestVarianceAlerts:

    def test_alerts_sorted_by_magnitude(
        self, analytics_service, budget_service, municipal_budget, park_categories,
        january_actuals, actor_id,
    ):
        budget_service.record_actual(
            park_categories["maintenance"].id, 2025, 2, Decimal("48000"), actor_id,
        )

        alerts = analytics_service.variance_alerts(2025)

        assert [a.name for a in alerts] == ["Donations", "Maintenance"]
        assert alerts[0].variance_pct == Decimal("-90")
        assert alerts[1].variance_pct == Decimal("-10")
        assert alerts[0].category_type is CategoryType.INCOME

    def test_threshold_from_module_config(
        self, session, analytics_config, municipal_budget, january_actuals,
    ):
        service = CashFlowAnalyticsService(
            session, config=analytics_config,
            module_config=BudgetModuleConfig(variance_alert_pct=Decimal("95")),
        )
        assert service.variance_alerts(2025) == []


class TestProjection:

    def test_default_projection(self, analytics_service, municipal_budget):
        projections = analytics_service.projection(municipal_budget.id)

        assert len(projections) == 3
        assert projections[0].year == 2026
        assert projections[0].scenario is Scenario.REALISTIC
        assert projections[0].income == Decimal("133800")
        assert projections[0].expenses == Decimal("62100")

    def test_explicit_parameters(self, analytics_service, municipal_budget):
        projections = analytics_service.projection(
            municipal_budget.id, scenario="pessimistic",
            inflation_rate_pct=Decimal("5"), years=1,
        )
        assert projections[0].income == Decimal("120000")
        assert projections[0].expenses == Decimal("63000")

    def test_scenario_comparison(self, analytics_service, municipal_budget):
        comparison = analytics_service.scenario_comparison(municipal_budget.id, years=1)

        assert comparison[Scenario.OPTIMISTIC][0].income == Decimal("142200")
        assert comparison[Scenario.PESSIMISTIC][0].income == Decimal("118200")

    def test_missing_budget(self, analytics_service):
        with pytest.raises(BudgetNotFoundError):
            analytics_service.projection(uuid4())


class TestAnalytics:

    def test_analytics(self, analytics_service, municipal_budget):
        analysis = analytics_service.analytics(municipal_budget.id)

        assert analysis.profit_margin_pct.value == Decimal("50")
        assert analysis.income_to_expense_ratio.value == Decimal("2")
        assert [s.name for s in analysis.income_by_category] == ["Donations"]
        assert [r.code for r in analysis.recommendations] == ["healthy", "diversification"]

    def test_stale_totals_are_recomputed(
        self, session, analytics_service, municipal_budget, captured_logs,
    ):
        model = session.get(BudgetModel, municipal_budget.id)
        model.total_income = Decimal("1")
        session.commit()

        analysis = analytics_service.analytics(municipal_budget.id)

        assert analysis.total_income == Decimal("120000")
        assert any(r["message"] == "budget_totals_stale" for r in captured_logs())

    def test_empty_budget(self, analytics_service, budget_service, actor_id):
        budget = budget_service.create_budget("Empty", 2025, actor_id)

        analysis = analytics_service.analytics(budget.id)

        assert [r.code for r in analysis.recommendations] == ["tight_margin", "diversification"]

    def test_missing_budget(self, analytics_service):
        with pytest.raises(BudgetNotFoundError):
            analytics_service.analytics(uuid4())


class TestParkScope:

    def test_park_budget_projection(self, analytics_service, budget_service, park_categories,
                                    actor_id, park_scope):
        budget = budget_service.create_budget("Park 7", 2025, actor_id, scope=park_scope)
        budget_service.add_line(
            budget.id, park_categories["concessions"].id, "Kiosks", Decimal("1000"), actor_id,
        )

        assert analytics_service.projection(budget.id, years=1)[0].income == Decimal("1115")
        assert analytics_service.cash_flow_matrix(2025, BudgetScope.municipal()).by_category()[
            park_categories["concessions"].id
        ].projected_total == 0
