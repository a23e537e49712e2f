"""
Budget Module Service (``parks_modules.budget.service``).

Responsibility
--------------
``BudgetService`` owns the write side of parks budgeting: categories,
budgets and their lifecycle, budget lines, and realized actual entries.
``CashFlowAnalyticsService`` owns the read side: it fetches the catalog,
the governing budget's lines and the actuals through selectors, then runs
the pure engines (matrix, summary, projection, analytics).

Architecture position
---------------------
**Modules layer** -- thin glue between persistence and the engines.  These
two classes are the sole public entry points for budget operations.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary (``commit`` on
  success, ``rollback`` and re-raise on exception).
* Lines change only while their budget is a draft.
* Budget totals are recomputed from the lines in the same transaction as
  every line change; they are never written by callers.
* Analytics reads complete before any engine runs; engines never touch
  the session.

Failure modes
-------------
* Missing budget  -> ``BudgetNotFoundError``.
* Missing line  -> ``BudgetLineNotFoundError``.
* Line change on a non-draft budget  -> ``BudgetNotEditableError``.
* Disallowed status change  -> ``InvalidBudgetTransitionError``.
* Unknown category  -> ``UnknownCategoryError``.
* Any exception inside a write  -> session rolled back, exception re-raised.

Audit relevance
---------------
Structured log events are emitted at commit for every public write
method, carrying budget ids, amounts and the acting user.  Every row
records ``created_by_id`` / ``updated_by_id``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from parks_config import AnalyticsConfig, get_active_config
from parks_engines.budget_analytics import BudgetAnalysis, BudgetAnalytics
from parks_engines.cashflow_matrix import CashFlowMatrix, CashFlowMatrixBuilder
from parks_engines.projection import Projection, ProjectionEngine, Scenario
from parks_engines.summary import CashFlowSummary, SummaryAggregator
from parks_kernel.domain.budget import (
    ActualEntry,
    Budget,
    BudgetLine,
    BudgetScope,
    BudgetStatus,
    can_transition,
    compute_totals,
)
from parks_kernel.domain.catalog import Category, CategoryCatalog, CategoryType
from parks_kernel.domain.clock import Clock, SystemClock
from parks_kernel.domain.values import ZERO, validate_month
from parks_kernel.exceptions import (
    BudgetLineNotFoundError,
    BudgetNotEditableError,
    BudgetNotFoundError,
    InvalidBudgetTransitionError,
    UnknownCategoryError,
)
from parks_kernel.logging_config import LogContext, get_logger
from parks_modules.budget.config import BudgetModuleConfig
from parks_modules.budget.models import DashboardSnapshot, VarianceAlert
from parks_modules.budget.orm import (
    ActualEntryModel,
    BudgetLineModel,
    BudgetModel,
    CategoryModel,
)
from parks_modules.budget.selectors import (
    ActualsSelector,
    BudgetSelector,
    CategorySelector,
)

logger = get_logger("modules.budget.service")


class BudgetService:
    """
    Write-side operations for categories, budgets, lines and actuals.

    Contract
    --------
    * Every public method returns the frozen domain object it produced.
    * ``actor_id`` is recorded on every row created or changed.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeds.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT compute matrices or analytics (``CashFlowAnalyticsService``).
    * Does NOT import actuals in bulk; ``record_actual`` is one entry.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._categories = CategorySelector(session)

    # =========================================================================
    # Categories
    # =========================================================================

    def create_category(
        self,
        name: str,
        category_type: CategoryType | str,
        actor_id: UUID,
        active: bool = True,
        parent_id: UUID | None = None,
        code: str | None = None,
        description: str | None = None,
    ) -> Category:
        """Create an income or expense category."""
        try:
            if parent_id is not None and self._session.get(CategoryModel, parent_id) is None:
                raise UnknownCategoryError(parent_id, source="parent category")

            category = Category(
                id=uuid4(),
                name=name,
                type=CategoryType(category_type),
                active=active,
                parent_id=parent_id,
                code=code,
            )
            model = CategoryModel.from_dto(category, created_by_id=actor_id)
            model.description = description
            self._session.add(model)
            self._session.commit()

            logger.info("category_created", extra={
                "category_id": str(category.id),
                "category_name": category.name,
                "category_type": category.type.value,
            })
            return category
        except Exception:
            self._session.rollback()
            raise

    def set_category_active(
        self,
        category_id: UUID,
        active: bool,
        actor_id: UUID,
    ) -> Category:
        """Activate or deactivate a category; existing lines and actuals are kept."""
        try:
            model = self._session.get(CategoryModel, category_id)
            if model is None:
                raise UnknownCategoryError(category_id, source="category update")
            model.active = active
            model.updated_by_id = actor_id
            self._session.commit()

            logger.info("category_active_changed", extra={
                "category_id": str(category_id),
                "active": active,
            })
            return model.to_dto()
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Budgets
    # =========================================================================

    def create_budget(
        self,
        name: str,
        year: int,
        actor_id: UUID,
        scope: BudgetScope | None = None,
        description: str | None = None,
    ) -> Budget:
        """Create an empty draft budget."""
        try:
            budget = Budget(
                id=uuid4(),
                name=name,
                year=year,
                scope=scope or BudgetScope.municipal(),
                description=description,
                created_date=self._clock.today(),
            )
            self._session.add(BudgetModel.from_dto(budget, created_by_id=actor_id))
            self._session.commit()

            logger.info("budget_created", extra={
                "budget_id": str(budget.id),
                "year": year,
                "scope": budget.scope.key,
            })
            return budget
        except Exception:
            self._session.rollback()
            raise

    def transition(
        self,
        budget_id: UUID,
        target_status: BudgetStatus | str,
        actor_id: UUID,
    ) -> Budget:
        """Move a budget along its lifecycle."""
        target = BudgetStatus(target_status)
        try:
            model = self._budget_model(budget_id)
            current = BudgetStatus(model.status)
            if not can_transition(current, target):
                logger.warning("budget_transition_rejected", extra={
                    "budget_id": str(budget_id),
                    "from_status": current.value,
                    "to_status": target.value,
                })
                raise InvalidBudgetTransitionError(budget_id, current.value, target.value)

            model.status = target.value
            model.updated_by_id = actor_id
            self._session.commit()

            logger.info("budget_transitioned", extra={
                "budget_id": str(budget_id),
                "from_status": current.value,
                "to_status": target.value,
            })
            return model.to_dto()
        except Exception:
            self._session.rollback()
            raise

    def recompute_totals(self, budget_id: UUID, actor_id: UUID) -> Budget:
        """Rewrite a budget's cached totals from its lines."""
        try:
            model = self._budget_model(budget_id)
            self._apply_totals(model, actor_id)
            self._session.commit()
            return model.to_dto()
        except Exception:
            self._session.rollback()
            raise

    def duplicate_budget(
        self,
        budget_id: UUID,
        actor_id: UUID,
        name: str | None = None,
        year: int | None = None,
        scope: BudgetScope | None = None,
    ) -> Budget:
        """
        Copy a budget and all its lines into a new draft.

        The copy keeps explicit monthly distributions; its name defaults to
        ``"<source name> (copy)"`` and year and scope default to the source's.
        """
        try:
            source = self._budget_model(budget_id)
            source_dto = source.to_dto()
            copy = Budget(
                id=uuid4(),
                name=name or f"{source.name} (copy)",
                year=year if year is not None else source.year,
                scope=scope or source_dto.scope,
                description=source.description,
                created_date=self._clock.today(),
            )
            model = BudgetModel.from_dto(copy, created_by_id=actor_id)
            for line_model in source.lines:
                line = dataclasses.replace(line_model.to_dto(), id=uuid4(), budget_id=copy.id)
                model.lines.append(BudgetLineModel.from_dto(line, created_by_id=actor_id))
            self._session.add(model)
            self._apply_totals(model, actor_id)
            self._session.commit()

            logger.info("budget_duplicated", extra={
                "source_budget_id": str(budget_id),
                "budget_id": str(copy.id),
                "line_count": len(model.lines),
            })
            return model.to_dto()
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Budget lines
    # =========================================================================

    def add_line(
        self,
        budget_id: UUID,
        category_id: UUID,
        concept: str,
        projected_amount: Decimal,
        actor_id: UUID,
        monthly_distribution: Sequence[Decimal] | None = None,
        notes: str | None = None,
    ) -> BudgetLine:
        """Add a line to a draft budget and refresh its totals."""
        try:
            model = self._editable_budget_model(budget_id)
            self._require_category(category_id)

            line = BudgetLine(
                id=uuid4(),
                budget_id=model.id,
                category_id=category_id,
                concept=concept,
                projected_amount=projected_amount,
                monthly_distribution=(
                    tuple(monthly_distribution) if monthly_distribution is not None else None
                ),
                notes=notes,
            )
            model.lines.append(BudgetLineModel.from_dto(line, created_by_id=actor_id))
            self._apply_totals(model, actor_id)
            self._session.commit()

            logger.info("budget_line_added", extra={
                "budget_id": str(budget_id),
                "line_id": str(line.id),
                "projected_amount": str(line.projected_amount),
                "explicit_distribution": line.has_explicit_distribution,
            })
            return line
        except Exception:
            self._session.rollback()
            raise

    def update_line(
        self,
        line_id: UUID,
        actor_id: UUID,
        concept: str | None = None,
        projected_amount: Decimal | None = None,
        monthly_distribution: Sequence[Decimal] | None = None,
        clear_distribution: bool = False,
        category_id: UUID | None = None,
        notes: str | None = None,
    ) -> BudgetLine:
        """
        Change a line of a draft budget.

        Only the given fields change.  ``clear_distribution`` reverts the
        line to the even distribution.  The updated line is validated as a
        whole, so changing the amount of a line with an explicit
        distribution requires a matching new distribution.
        """
        try:
            line_model = self._session.get(BudgetLineModel, line_id)
            if line_model is None:
                raise BudgetLineNotFoundError(line_id)
            budget_model = self._editable_budget_model(line_model.budget_id)

            changes: dict = {}
            if concept is not None:
                changes["concept"] = concept
            if projected_amount is not None:
                changes["projected_amount"] = projected_amount
            if clear_distribution:
                changes["monthly_distribution"] = None
            elif monthly_distribution is not None:
                changes["monthly_distribution"] = tuple(monthly_distribution)
            if category_id is not None:
                self._require_category(category_id)
                changes["category_id"] = category_id
            if notes is not None:
                changes["notes"] = notes

            line = dataclasses.replace(line_model.to_dto(), **changes)

            line_model.concept = line.concept
            line_model.category_id = line.category_id
            line_model.projected_amount = line.projected_amount
            line_model.notes = line.notes
            line_model.set_monthly_values(line.monthly_distribution)
            line_model.updated_by_id = actor_id
            self._apply_totals(budget_model, actor_id)
            self._session.commit()

            logger.info("budget_line_updated", extra={
                "budget_id": str(budget_model.id),
                "line_id": str(line_id),
                "changed_fields": sorted(changes),
            })
            return line
        except Exception:
            self._session.rollback()
            raise

    def remove_line(self, line_id: UUID, actor_id: UUID) -> Budget:
        """Delete a line from a draft budget and refresh its totals."""
        try:
            line_model = self._session.get(BudgetLineModel, line_id)
            if line_model is None:
                raise BudgetLineNotFoundError(line_id)
            budget_model = self._editable_budget_model(line_model.budget_id)

            budget_model.lines.remove(line_model)
            self._apply_totals(budget_model, actor_id)
            self._session.commit()

            logger.info("budget_line_removed", extra={
                "budget_id": str(budget_model.id),
                "line_id": str(line_id),
            })
            return budget_model.to_dto()
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Actuals
    # =========================================================================

    def record_actual(
        self,
        category_id: UUID,
        year: int,
        month: int,
        amount: Decimal,
        actor_id: UUID,
        scope: BudgetScope | None = None,
        description: str | None = None,
    ) -> ActualEntry:
        """Record a realized monthly amount for a category."""
        scope = scope or BudgetScope.municipal()
        try:
            self._require_category(category_id, source="actual entry")
            entry = ActualEntry(category_id=category_id, month=month, year=year, amount=amount)
            self._session.add(ActualEntryModel.from_dto(
                entry,
                created_by_id=actor_id,
                park_id=scope.park_id,
                description=description,
            ))
            self._session.commit()

            logger.info("actual_recorded", extra={
                "category_id": str(category_id),
                "year": year,
                "month": month,
                "amount": str(entry.amount),
                "scope": scope.key,
            })
            return entry
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Helpers
    # =========================================================================

    def _budget_model(self, budget_id: UUID) -> BudgetModel:
        model = self._session.get(BudgetModel, budget_id)
        if model is None:
            raise BudgetNotFoundError(budget_id)
        return model

    def _editable_budget_model(self, budget_id: UUID) -> BudgetModel:
        model = self._budget_model(budget_id)
        if model.status != BudgetStatus.DRAFT.value:
            raise BudgetNotEditableError(budget_id, model.status)
        return model

    def _require_category(self, category_id: UUID, source: str = "budget line") -> None:
        if self._session.get(CategoryModel, category_id) is None:
            raise UnknownCategoryError(category_id, source=source)

    def _apply_totals(self, model: BudgetModel, actor_id: UUID) -> None:
        catalog = self._categories.catalog()
        income, expenses = compute_totals([line.to_dto() for line in model.lines], catalog)
        model.total_income = income
        model.total_expenses = expenses
        model.updated_by_id = actor_id


class CashFlowAnalyticsService:
    """
    Read-side facade over the pure engines.

    Contract
    --------
    * Never writes: no add, flush, commit or delete.
    * All selector reads for an operation finish before the first engine
      call.

    Guarantees
    ----------
    * The matrix for (year, scope) uses the governing budget for that
      year and scope (see ``BudgetSelector.governing_budget``); with no
      budget the projected channel is all zeros.
    * Engine thresholds and the scenario growth table come from the
      ``AnalyticsConfig`` given at construction.
    """

    def __init__(
        self,
        session: Session,
        config: AnalyticsConfig | None = None,
        module_config: BudgetModuleConfig | None = None,
    ):
        self._session = session
        self._config = config or get_active_config()
        self._module_config = module_config or BudgetModuleConfig.with_defaults()

        self._categories = CategorySelector(session)
        self._budgets = BudgetSelector(session)
        self._actuals = ActualsSelector(session)

        self._matrix_builder = CashFlowMatrixBuilder()
        self._aggregator = SummaryAggregator()
        self._projection = ProjectionEngine(self._config.projection.growth_table())
        self._analytics = BudgetAnalytics(self._config.thresholds)

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    # =========================================================================
    # Matrix and summary
    # =========================================================================

    def cash_flow_matrix(self, year: int, scope: BudgetScope | None = None) -> CashFlowMatrix:
        """Projected-versus-real matrix for (year, scope)."""
        scope = scope or BudgetScope.municipal()
        with LogContext.bind(park_id=scope.park_id):
            budget = self._budgets.governing_budget(year, scope)
            return self._matrix_for(year, scope, budget)

    def cash_flow_summary(self, year: int, scope: BudgetScope | None = None) -> CashFlowSummary:
        """Monthly and annual rollups of the matrix for (year, scope)."""
        return self._aggregator.summarize(self.cash_flow_matrix(year, scope))

    def dashboard_snapshot(
        self,
        year: int,
        month: int,
        scope: BudgetScope | None = None,
    ) -> DashboardSnapshot:
        """Realized income and expenses for ``month`` and for the year to date."""
        validate_month(month)
        scope = scope or BudgetScope.municipal()
        real = self.cash_flow_summary(year, scope).real.monthly
        return DashboardSnapshot(
            year=year,
            month=month,
            scope=scope,
            currency=self._module_config.default_currency,
            month_income=real.income[month - 1],
            month_expenses=real.expenses[month - 1],
            ytd_income=sum(real.income[:month], ZERO),
            ytd_expenses=sum(real.expenses[:month], ZERO),
        )

    def variance_alerts(
        self,
        year: int,
        scope: BudgetScope | None = None,
    ) -> list[VarianceAlert]:
        """Categories whose annual variance magnitude reaches the alert threshold."""
        threshold = self._module_config.variance_alert_pct
        matrix = self.cash_flow_matrix(year, scope)
        alerts = [
            VarianceAlert(
                category_id=row.category_id,
                name=row.category.name,
                category_type=row.category_type,
                projected_total=row.projected_total,
                real_total=row.real_total,
                variance_pct=row.total_variance_pct,
            )
            for row in matrix.rows
            if abs(row.total_variance_pct) >= threshold
        ]
        alerts.sort(key=lambda a: (-abs(a.variance_pct), a.name))
        if alerts:
            logger.info("variance_alerts_raised", extra={
                "year": year,
                "alert_count": len(alerts),
                "threshold_pct": str(threshold),
            })
        return alerts

    # =========================================================================
    # Projection and analytics
    # =========================================================================

    def projection(
        self,
        budget_id: UUID,
        scenario: Scenario | str = Scenario.REALISTIC,
        inflation_rate_pct: Decimal | None = None,
        years: int | None = None,
    ) -> list[Projection]:
        """Project future years from the budget's projected annual summary."""
        with LogContext.bind(budget_id=budget_id):
            base = self._projected_base(budget_id)
            return self._projection.project(
                base=base,
                scenario=scenario,
                inflation_rate_pct=self._inflation(inflation_rate_pct),
                years=self._horizon(years),
            )

    def scenario_comparison(
        self,
        budget_id: UUID,
        inflation_rate_pct: Decimal | None = None,
        years: int | None = None,
    ) -> dict[Scenario, list[Projection]]:
        """All scenarios side by side for the same budget and inflation rate."""
        with LogContext.bind(budget_id=budget_id):
            base = self._projected_base(budget_id)
            return self._projection.project_all_scenarios(
                base=base,
                inflation_rate_pct=self._inflation(inflation_rate_pct),
                years=self._horizon(years),
            )

    def analytics(self, budget_id: UUID) -> BudgetAnalysis:
        """Ratios, category distributions and recommendations for one budget."""
        with LogContext.bind(budget_id=budget_id):
            budget = self._budgets.require(budget_id)
            lines = self._budgets.lines(budget_id)
            catalog = self._categories.catalog()

            income, expenses = compute_totals(lines, catalog)
            if (income, expenses) != (budget.total_income, budget.total_expenses):
                logger.warning("budget_totals_stale", extra={
                    "stored_income": str(budget.total_income),
                    "stored_expenses": str(budget.total_expenses),
                    "line_income": str(income),
                    "line_expenses": str(expenses),
                })
            budget = dataclasses.replace(budget, total_income=income, total_expenses=expenses)
            return self._analytics.analyze_budget(budget, lines, catalog)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _read_inputs(
        self,
        year: int,
        scope: BudgetScope,
        budget: Budget | None,
    ) -> tuple[CategoryCatalog, list[BudgetLine], list[ActualEntry]]:
        catalog = self._categories.catalog()
        lines = self._budgets.lines(budget.id) if budget is not None else []
        actuals = self._actuals.for_year(year, scope)
        return catalog, lines, actuals

    def _matrix_for(
        self,
        year: int,
        scope: BudgetScope,
        budget: Budget | None,
    ) -> CashFlowMatrix:
        catalog, lines, actuals = self._read_inputs(year, scope, budget)
        if budget is None:
            logger.info("cashflow_no_budget", extra={"year": year, "scope": scope.key})
        return self._matrix_builder.build(
            year=year,
            scope=scope,
            categories=catalog,
            budget_lines=lines,
            actuals=actuals,
        )

    def _projected_base(self, budget_id: UUID):
        budget = self._budgets.require(budget_id)
        matrix = self._matrix_for(budget.year, budget.scope, budget)
        return self._aggregator.summarize(matrix).projected.annual

    def _inflation(self, inflation_rate_pct: Decimal | None) -> Decimal:
        if inflation_rate_pct is None:
            return self._config.projection.default_inflation_rate_pct
        return inflation_rate_pct

    def _horizon(self, years: int | None) -> int:
        if years is None:
            return self._config.projection.default_horizon_years
        return years
