"""
Budget -- Budgets, budget lines and realized monthly actuals.

Responsibility:
    Frozen value objects for the planning side (``Budget``, ``BudgetLine``)
    and the realized side (``ActualEntry``) of parks cash flow.  A budget
    line owns the policy that turns its annual projected amount into a
    12-month vector.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O.  Consumed by the
    engines and produced by the budget selectors.

Invariants enforced:
    - ``BudgetLine.projected_amount >= 0`` (checked at construction).
    - An explicit monthly distribution has exactly 12 non-negative values
      summing to ``projected_amount`` within ``DISTRIBUTION_TOLERANCE``.
    - ``BudgetLine.monthly_vector()`` sums exactly to ``projected_amount``
      under the even-distribution policy (December absorbs the remainder).
    - ``Budget.net`` is derived, never stored.

Failure modes:
    - InvalidBudgetLineError on any construction-time violation above.
    - ValueError on an ActualEntry with a month outside 1..12.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from parks_kernel.domain.catalog import CategoryCatalog, CategoryType
from parks_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    to_decimal,
    validate_month,
)
from parks_kernel.exceptions import InvalidBudgetLineError

# One cent: an explicit distribution may differ from the annual amount by
# at most this much.
DISTRIBUTION_TOLERANCE = Decimal("0.01")


class BudgetStatus(str, Enum):
    """Budget lifecycle states."""

    DRAFT = "draft"
    APPROVED = "approved"
    ACTIVE = "active"
    ARCHIVED = "archived"


ALLOWED_TRANSITIONS: dict[BudgetStatus, frozenset[BudgetStatus]] = {
    BudgetStatus.DRAFT: frozenset({BudgetStatus.APPROVED}),
    BudgetStatus.APPROVED: frozenset({BudgetStatus.ACTIVE, BudgetStatus.DRAFT}),
    BudgetStatus.ACTIVE: frozenset({BudgetStatus.ARCHIVED}),
    BudgetStatus.ARCHIVED: frozenset(),
}


def can_transition(current: BudgetStatus, target: BudgetStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class BudgetScope:
    """Municipality-wide (park_id is None) or a single park."""

    park_id: int | None = None

    @classmethod
    def municipal(cls) -> BudgetScope:
        return cls(None)

    @classmethod
    def park(cls, park_id: int) -> BudgetScope:
        return cls(park_id)

    @property
    def is_municipal(self) -> bool:
        return self.park_id is None

    @property
    def key(self) -> str:
        return "municipal" if self.park_id is None else f"park:{self.park_id}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class BudgetLine:
    """
    A planned annual amount for one category within one budget.

    Monthly policy: an explicit ``monthly_distribution`` is used verbatim;
    without one, months 1..11 receive ``projected_amount / 12`` at full
    precision and December receives the remainder.
    """

    id: Hashable
    budget_id: Hashable
    category_id: Hashable
    concept: str
    projected_amount: Decimal
    monthly_distribution: tuple[Decimal, ...] | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        try:
            amount = to_decimal(self.projected_amount)
        except ValueError as e:
            raise InvalidBudgetLineError(str(e), self.id, self.concept) from e
        if amount < ZERO:
            raise InvalidBudgetLineError(
                f"projected amount cannot be negative ({amount})", self.id, self.concept
            )
        object.__setattr__(self, "projected_amount", amount)

        if self.monthly_distribution is not None:
            object.__setattr__(
                self, "monthly_distribution", self._validated_distribution(amount)
            )

    def _validated_distribution(self, amount: Decimal) -> tuple[Decimal, ...]:
        raw = tuple(self.monthly_distribution)
        if len(raw) != MONTHS_PER_YEAR:
            raise InvalidBudgetLineError(
                f"monthly distribution needs 12 values, got {len(raw)}",
                self.id, self.concept,
            )
        try:
            values = tuple(to_decimal(v) for v in raw)
        except ValueError as e:
            raise InvalidBudgetLineError(str(e), self.id, self.concept) from e
        for month, value in enumerate(values, start=1):
            if value < ZERO:
                raise InvalidBudgetLineError(
                    f"month {month} amount cannot be negative ({value})",
                    self.id, self.concept,
                )
        total = sum(values, ZERO)
        if abs(total - amount) > DISTRIBUTION_TOLERANCE:
            raise InvalidBudgetLineError(
                f"monthly distribution sums to {total}, expected {amount}",
                self.id, self.concept,
            )
        return values

    @property
    def has_explicit_distribution(self) -> bool:
        return self.monthly_distribution is not None

    def monthly_vector(self) -> tuple[Decimal, ...]:
        """The 12 projected monthly amounts for this line."""
        if self.monthly_distribution is not None:
            return self.monthly_distribution
        share = self.projected_amount / MONTHS_PER_YEAR
        head = [share] * (MONTHS_PER_YEAR - 1)
        december = self.projected_amount - sum(head, ZERO)
        return tuple(head + [december])


@dataclass(frozen=True)
class ActualEntry:
    """A realized monthly total for one category (read-only to the engine)."""

    category_id: Hashable
    month: int
    year: int
    amount: Decimal

    def __post_init__(self) -> None:
        validate_month(self.month)
        object.__setattr__(self, "amount", to_decimal(self.amount))


@dataclass(frozen=True)
class Budget:
    """
    An annual budget, municipal or park-scoped.

    ``total_income`` and ``total_expenses`` are caches of the line sums and
    are only ever produced by ``compute_totals``.
    """

    id: Hashable
    name: str
    year: int
    scope: BudgetScope = field(default_factory=BudgetScope.municipal)
    status: BudgetStatus = BudgetStatus.DRAFT
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    description: str | None = None
    created_date: date | None = None

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def is_editable(self) -> bool:
        return self.status is BudgetStatus.DRAFT


def split_lines(
    lines: Iterable[BudgetLine],
    catalog: CategoryCatalog,
) -> tuple[list[BudgetLine], list[BudgetLine]]:
    """Partition lines into (income, expense) by their category type."""
    income: list[BudgetLine] = []
    expense: list[BudgetLine] = []
    for line in lines:
        category = catalog.require(line.category_id, source="budget line")
        (income if category.type is CategoryType.INCOME else expense).append(line)
    return income, expense


def compute_totals(
    lines: Sequence[BudgetLine],
    catalog: CategoryCatalog,
) -> tuple[Decimal, Decimal]:
    """Recompute (total_income, total_expenses) from a budget's lines."""
    income, expense = split_lines(lines, catalog)
    return (
        sum((line.projected_amount for line in income), ZERO),
        sum((line.projected_amount for line in expense), ZERO),
    )
