"""
Read-only selectors for the Budget module.

Responsibility
--------------
Fetch the category catalog, budgets, budget lines and actual entries that
the engines consume, converted to frozen domain objects.

Architecture position
---------------------
**Modules layer** -- query side.  Used by ``CashFlowAnalyticsService`` to
complete every read before computation starts, and by ``BudgetService``
to validate references.  Selectors never add, flush, commit or delete.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import case, select

from parks_kernel.domain.budget import (
    ActualEntry,
    Budget,
    BudgetLine,
    BudgetScope,
    BudgetStatus,
)
from parks_kernel.domain.catalog import CategoryCatalog, CategoryType
from parks_kernel.exceptions import BudgetNotFoundError
from parks_kernel.logging_config import get_logger
from parks_kernel.selectors.base import BaseSelector
from parks_modules.budget.orm import (
    ActualEntryModel,
    BudgetLineModel,
    BudgetModel,
    CategoryModel,
)

logger = get_logger("modules.budget.selectors")

# Which budget governs a (year, scope) when several exist
_STATUS_PRECEDENCE = {
    BudgetStatus.ACTIVE.value: 0,
    BudgetStatus.APPROVED.value: 1,
    BudgetStatus.DRAFT.value: 2,
    BudgetStatus.ARCHIVED.value: 3,
}


def _scope_clause(column, scope: BudgetScope):
    if scope.is_municipal:
        return column.is_(None)
    return column == scope.park_id


class CategorySelector(BaseSelector[CategoryModel]):
    """Category catalog queries."""

    def catalog(
        self,
        include_inactive: bool = True,
        category_type: CategoryType | None = None,
    ) -> CategoryCatalog:
        stmt = select(CategoryModel)
        if not include_inactive:
            stmt = stmt.where(CategoryModel.active.is_(True))
        if category_type is not None:
            stmt = stmt.where(CategoryModel.type == CategoryType(category_type).value)
        models = self.session.scalars(stmt).all()
        return CategoryCatalog(model.to_dto() for model in models)


class BudgetSelector(BaseSelector[BudgetModel]):
    """Budget header and line queries."""

    def get(self, budget_id: UUID) -> Budget | None:
        model = self.session.get(BudgetModel, budget_id)
        return model.to_dto() if model is not None else None

    def require(self, budget_id: UUID) -> Budget:
        budget = self.get(budget_id)
        if budget is None:
            raise BudgetNotFoundError(budget_id)
        return budget

    def list_budgets(
        self,
        year: int | None = None,
        scope: BudgetScope | None = None,
        status: BudgetStatus | None = None,
    ) -> list[Budget]:
        stmt = select(BudgetModel)
        if year is not None:
            stmt = stmt.where(BudgetModel.year == year)
        if scope is not None:
            stmt = stmt.where(_scope_clause(BudgetModel.park_id, scope))
        if status is not None:
            stmt = stmt.where(BudgetModel.status == BudgetStatus(status).value)
        stmt = stmt.order_by(BudgetModel.year.desc(), BudgetModel.name)
        return [model.to_dto() for model in self.session.scalars(stmt).all()]

    def governing_budget(self, year: int, scope: BudgetScope) -> Budget | None:
        """
        The budget whose lines feed the matrix for (year, scope).

        Active wins over approved, approved over draft, draft over archived;
        ties go to the most recently created, then to the highest id so
        budgets created within the same second resolve the same way.
        """
        precedence = case(_STATUS_PRECEDENCE, value=BudgetModel.status, else_=99)
        stmt = (
            select(BudgetModel)
            .where(BudgetModel.year == year)
            .where(_scope_clause(BudgetModel.park_id, scope))
            .order_by(precedence, BudgetModel.created_at.desc(), BudgetModel.id.desc())
            .limit(1)
        )
        model = self.session.scalars(stmt).first()
        return model.to_dto() if model is not None else None

    def lines(self, budget_id: UUID) -> list[BudgetLine]:
        stmt = (
            select(BudgetLineModel)
            .where(BudgetLineModel.budget_id == budget_id)
            .order_by(BudgetLineModel.concept, BudgetLineModel.id)
        )
        return [model.to_dto() for model in self.session.scalars(stmt).all()]


class ActualsSelector(BaseSelector[ActualEntryModel]):
    """Realized monthly totals."""

    def for_year(
        self,
        year: int,
        scope: BudgetScope,
        months: Sequence[int] | None = None,
    ) -> list[ActualEntry]:
        stmt = (
            select(ActualEntryModel)
            .where(ActualEntryModel.year == year)
            .where(_scope_clause(ActualEntryModel.park_id, scope))
        )
        if months is not None:
            stmt = stmt.where(ActualEntryModel.month.in_(list(months)))
        stmt = stmt.order_by(ActualEntryModel.month, ActualEntryModel.id)
        entries = [model.to_dto() for model in self.session.scalars(stmt).all()]
        logger.debug("actuals_selected", extra={
            "year": year,
            "scope": scope.key,
            "entry_count": len(entries),
        })
        return entries
