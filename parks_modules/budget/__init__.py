"""
Budget module: categories, budgets, budget lines and realized actuals,
plus the cash-flow analytics facade over the engines.
"""

from parks_modules.budget.config import BudgetModuleConfig
from parks_modules.budget.models import DashboardSnapshot, VarianceAlert
from parks_modules.budget.service import BudgetService, CashFlowAnalyticsService

__all__ = [
    "BudgetModuleConfig",
    "BudgetService",
    "CashFlowAnalyticsService",
    "DashboardSnapshot",
    "VarianceAlert",
]
