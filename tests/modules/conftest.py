"""
Shared fixtures for budget module tests.

DESIGN RULE: Every fixture is opt-in.  No autouse.  Each test declares the
categories and budgets it depends on in its function signature.
"""

from decimal import Decimal

import pytest

from parks_kernel.domain.budget import BudgetScope
from parks_kernel.domain.catalog import CategoryType
from parks_modules.budget import BudgetService, CashFlowAnalyticsService


@pytest.fixture
def budget_service(session, deterministic_clock):
    return BudgetService(session, clock=deterministic_clock)


@pytest.fixture
def analytics_service(session, analytics_config):
    return CashFlowAnalyticsService(session, config=analytics_config)


@pytest.fixture
def park_categories(budget_service, actor_id):
    """Donations and Concessions (income), Maintenance and Payroll (expense)."""
    return {
        "donations": budget_service.create_category(
            "Donations", CategoryType.INCOME, actor_id, code="ING-DON",
        ),
        "concessions": budget_service.create_category(
            "Concessions", CategoryType.INCOME, actor_id, code="ING-CON",
        ),
        "maintenance": budget_service.create_category(
            "Maintenance", CategoryType.EXPENSE, actor_id, code="EGR-MAN",
        ),
        "payroll": budget_service.create_category(
            "Payroll", CategoryType.EXPENSE, actor_id, code="EGR-NOM",
        ),
    }


@pytest.fixture
def municipal_budget(budget_service, park_categories, actor_id):
    """A 2025 municipal draft: Donations 120,000 and Maintenance 60,000, even."""
    budget = budget_service.create_budget("Municipal 2025", 2025, actor_id)
    budget_service.add_line(
        budget.id, park_categories["donations"].id, "Private donations",
        Decimal("120000"), actor_id,
    )
    budget_service.add_line(
        budget.id, park_categories["maintenance"].id, "Green areas",
        Decimal("60000"), actor_id,
    )
    return budget_service.recompute_totals(budget.id, actor_id)


@pytest.fixture
def park_scope():
    return BudgetScope.park(7)
