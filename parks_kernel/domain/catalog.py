"""
Catalog -- Income and expense categories.

Responsibility:
    ``Category`` is the flat (id, name, type, active) record the engines
    consume.  ``CategoryCatalog`` is an immutable id lookup over a set of
    categories.  ``CategoryTree`` is the separate adjacency lookup over
    ``parent_id`` used for display paths; engines never consult it.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O.  Supplied by the
    catalog selector (``parks_modules.budget.selectors``) or built directly
    in tests.

Invariants enforced:
    - Category ids are unique within a catalog.
    - ``CategoryTree.ancestors`` terminates or raises ``CategoryCycleError``.

Failure modes:
    - ValueError on duplicate ids or blank names.
    - UnknownCategoryError from ``require`` when the id is absent.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from parks_kernel.exceptions import CategoryCycleError, UnknownCategoryError


class CategoryType(str, Enum):
    """Direction of cash flow for a category."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Category:
    """An income or expense category."""

    id: Hashable
    name: str
    type: CategoryType
    active: bool = True
    parent_id: Hashable | None = None
    code: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError(f"Category {self.id} must have a name")
        if not isinstance(self.type, CategoryType):
            object.__setattr__(self, "type", CategoryType(self.type))

    @property
    def is_income(self) -> bool:
        return self.type is CategoryType.INCOME


class CategoryCatalog:
    """
    Immutable id lookup over a flat collection of categories.

    Iteration order is income categories first, then expense, each sorted
    by name, which is the row order of the cash-flow matrix.
    """

    def __init__(self, categories: Iterable[Category]):
        by_id: dict[Hashable, Category] = {}
        for category in categories:
            if category.id in by_id:
                raise ValueError(f"Duplicate category id: {category.id}")
            by_id[category.id] = category
        self._by_id = by_id
        self._ordered = tuple(
            sorted(
                by_id.values(),
                key=lambda c: (c.type is not CategoryType.INCOME, c.name.casefold(), str(c.id)),
            )
        )

    @classmethod
    def coerce(cls, categories: CategoryCatalog | Iterable[Category]) -> CategoryCatalog:
        if isinstance(categories, CategoryCatalog):
            return categories
        return cls(categories)

    def get(self, category_id: Hashable) -> Category | None:
        return self._by_id.get(category_id)

    def require(self, category_id: Hashable, source: str = "actual") -> Category:
        category = self._by_id.get(category_id)
        if category is None:
            raise UnknownCategoryError(category_id, source=source)
        return category

    def contains(self, category_id: Hashable) -> bool:
        return category_id in self._by_id

    def of_type(self, category_type: CategoryType) -> tuple[Category, ...]:
        return tuple(c for c in self._ordered if c.type is category_type)

    def active(self) -> tuple[Category, ...]:
        return tuple(c for c in self._ordered if c.active)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id


class CategoryTree:
    """Parent/child adjacency over a catalog, for display paths."""

    def __init__(self, catalog: CategoryCatalog):
        self._catalog = catalog
        children: dict[Hashable, list[Category]] = {}
        for category in catalog:
            if category.parent_id is not None:
                children.setdefault(category.parent_id, []).append(category)
        self._children = children

    def children(self, category_id: Hashable) -> tuple[Category, ...]:
        return tuple(self._children.get(category_id, ()))

    def roots(self) -> tuple[Category, ...]:
        return tuple(
            c for c in self._catalog
            if c.parent_id is None or not self._catalog.contains(c.parent_id)
        )

    def ancestors(self, category_id: Hashable) -> tuple[Category, ...]:
        """Ancestors from the immediate parent up to the root."""
        category = self._catalog.require(category_id, source="category tree")
        seen = {category.id}
        chain: list[Category] = []
        parent_id = category.parent_id
        while parent_id is not None:
            if parent_id in seen:
                raise CategoryCycleError(category_id)
            parent = self._catalog.get(parent_id)
            if parent is None:
                break
            seen.add(parent_id)
            chain.append(parent)
            parent_id = parent.parent_id
        return tuple(chain)

    def path(self, category_id: Hashable) -> tuple[str, ...]:
        """Names from the root down to the category itself."""
        category = self._catalog.require(category_id, source="category tree")
        names = [c.name for c in reversed(self.ancestors(category_id))]
        names.append(category.name)
        return tuple(names)
