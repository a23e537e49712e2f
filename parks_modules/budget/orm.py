"""
SQLAlchemy ORM persistence models for the Budget module.

Responsibility
--------------
Provide database-backed persistence for categories, budgets, budget lines
and realized monthly actual entries.  The cash-flow matrix, summaries,
projections and analyses are computed artifacts and have no tables.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``BudgetService`` (writes) and
the budget selectors (reads).  Inherits from ``TrackedBase`` (kernel db
layer).  Every model converts to and from its frozen domain type through
``to_dto`` / ``from_dto``.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` (Numeric(38,9)) -- NEVER float.
* Enum fields stored as String(20) for readability and portability.
* A budget line stores its monthly distribution in twelve nullable month
  columns; all twelve NULL means "even distribution".
* ``park_id`` NULL means municipal scope.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parks_kernel.db.base import TrackedBase
from parks_kernel.domain.values import ZERO

MONTH_COLUMNS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


# ---------------------------------------------------------------------------
# CategoryModel
# ---------------------------------------------------------------------------


class CategoryModel(TrackedBase):
    """
    An income or expense category.

    Maps to ``parks_kernel.domain.catalog.Category``.
    """

    __tablename__ = "parks_categories"

    __table_args__ = (
        Index("idx_category_type", "type"),
        Index("idx_category_parent", "parent_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("parks_categories.id"), nullable=True,
    )

    def to_dto(self):
        from parks_kernel.domain.catalog import Category, CategoryType

        return Category(
            id=self.id,
            name=self.name,
            type=CategoryType(self.type),
            active=self.active,
            parent_id=self.parent_id,
            code=self.code,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "CategoryModel":
        return cls(
            id=dto.id,
            name=dto.name,
            type=dto.type.value,
            active=dto.active,
            parent_id=dto.parent_id,
            code=dto.code,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<CategoryModel {self.name} [{self.type}]>"


# ---------------------------------------------------------------------------
# BudgetModel
# ---------------------------------------------------------------------------


class BudgetModel(TrackedBase):
    """
    An annual budget header, municipal or park-scoped.

    Guarantees:
        - ``status`` follows draft -> approved -> active -> archived
          (approved may return to draft).
        - ``total_income`` / ``total_expenses`` are caches rewritten by
          ``BudgetService.recompute_totals`` after every line change.
    """

    __tablename__ = "parks_budgets"

    __table_args__ = (
        Index("idx_budget_year_park", "year", "park_id"),
        Index("idx_budget_status", "status"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int]
    park_id: Mapped[int | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    total_income: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    total_expenses: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    lines: Mapped[list["BudgetLineModel"]] = relationship(
        "BudgetLineModel",
        back_populates="budget",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dto(self):
        from parks_kernel.domain.budget import Budget, BudgetScope, BudgetStatus

        return Budget(
            id=self.id,
            name=self.name,
            year=self.year,
            scope=BudgetScope(self.park_id),
            status=BudgetStatus(self.status),
            total_income=self.total_income if self.total_income is not None else ZERO,
            total_expenses=self.total_expenses if self.total_expenses is not None else ZERO,
            description=self.description,
            created_date=self.created_date,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "BudgetModel":
        return cls(
            id=dto.id,
            name=dto.name,
            year=dto.year,
            park_id=dto.scope.park_id,
            status=dto.status.value,
            total_income=dto.total_income,
            total_expenses=dto.total_expenses,
            description=dto.description,
            created_date=dto.created_date,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        scope = "municipal" if self.park_id is None else f"park {self.park_id}"
        return f"<BudgetModel {self.name} {self.year} {scope} [{self.status}]>"


# ---------------------------------------------------------------------------
# BudgetLineModel
# ---------------------------------------------------------------------------


class BudgetLineModel(TrackedBase):
    """
    A planned annual amount for one category within a budget.

    Maps to ``parks_kernel.domain.budget.BudgetLine``.
    """

    __tablename__ = "parks_budget_lines"

    __table_args__ = (
        Index("idx_budget_line_budget", "budget_id"),
        Index("idx_budget_line_category", "category_id"),
    )

    budget_id: Mapped[UUID] = mapped_column(ForeignKey("parks_budgets.id"), nullable=False)
    category_id: Mapped[UUID] = mapped_column(ForeignKey("parks_categories.id"), nullable=False)
    concept: Mapped[str] = mapped_column(String(255), nullable=False)
    projected_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    january: Mapped[Decimal | None] = mapped_column(nullable=True)
    february: Mapped[Decimal | None] = mapped_column(nullable=True)
    march: Mapped[Decimal | None] = mapped_column(nullable=True)
    april: Mapped[Decimal | None] = mapped_column(nullable=True)
    may: Mapped[Decimal | None] = mapped_column(nullable=True)
    june: Mapped[Decimal | None] = mapped_column(nullable=True)
    july: Mapped[Decimal | None] = mapped_column(nullable=True)
    august: Mapped[Decimal | None] = mapped_column(nullable=True)
    september: Mapped[Decimal | None] = mapped_column(nullable=True)
    october: Mapped[Decimal | None] = mapped_column(nullable=True)
    november: Mapped[Decimal | None] = mapped_column(nullable=True)
    december: Mapped[Decimal | None] = mapped_column(nullable=True)

    budget: Mapped["BudgetModel"] = relationship(
        "BudgetModel",
        back_populates="lines",
    )

    def monthly_values(self) -> tuple[Decimal | None, ...]:
        return tuple(getattr(self, column) for column in MONTH_COLUMNS)

    def set_monthly_values(self, values) -> None:
        """Write an explicit distribution, or clear all months for ``None``."""
        if values is None:
            values = (None,) * len(MONTH_COLUMNS)
        for column, value in zip(MONTH_COLUMNS, values, strict=True):
            setattr(self, column, value)

    def to_dto(self):
        from parks_kernel.domain.budget import BudgetLine

        months = self.monthly_values()
        distribution = None
        if any(value is not None for value in months):
            distribution = tuple(ZERO if value is None else value for value in months)

        return BudgetLine(
            id=self.id,
            budget_id=self.budget_id,
            category_id=self.category_id,
            concept=self.concept,
            projected_amount=self.projected_amount,
            monthly_distribution=distribution,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "BudgetLineModel":
        model = cls(
            id=dto.id,
            budget_id=dto.budget_id,
            category_id=dto.category_id,
            concept=dto.concept,
            projected_amount=dto.projected_amount,
            notes=dto.notes,
            created_by_id=created_by_id,
        )
        model.set_monthly_values(dto.monthly_distribution)
        return model

    def __repr__(self) -> str:
        return f"<BudgetLineModel {self.concept} {self.projected_amount}>"


# ---------------------------------------------------------------------------
# ActualEntryModel
# ---------------------------------------------------------------------------


class ActualEntryModel(TrackedBase):
    """
    A realized monthly total for one category and scope.

    Several rows for the same (category, year, month, park) are allowed and
    are summed by the cash-flow matrix.
    """

    __tablename__ = "parks_actual_entries"

    __table_args__ = (
        Index("idx_actual_year_park", "year", "park_id"),
        Index("idx_actual_category", "category_id"),
    )

    category_id: Mapped[UUID] = mapped_column(ForeignKey("parks_categories.id"), nullable=False)
    year: Mapped[int]
    month: Mapped[int]
    park_id: Mapped[int | None] = mapped_column(nullable=True)
    amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def to_dto(self):
        from parks_kernel.domain.budget import ActualEntry

        return ActualEntry(
            category_id=self.category_id,
            month=self.month,
            year=self.year,
            amount=self.amount,
        )

    @classmethod
    def from_dto(
        cls,
        dto,
        created_by_id: UUID,
        park_id: int | None = None,
        description: str | None = None,
    ) -> "ActualEntryModel":
        return cls(
            category_id=dto.category_id,
            year=dto.year,
            month=dto.month,
            amount=dto.amount,
            park_id=park_id,
            description=description,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ActualEntryModel {self.year}-{self.month:02d} {self.amount}>"
