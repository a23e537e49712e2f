"""
Module: parks_kernel.db.base
Responsibility: Declarative base for the parks ORM models.  Fixes how ids,
    money and timestamps are stored, and adds creator/updater tracking
    through ``TrackedBase``.
Architecture position: Kernel > DB.  Imported by every ORM module.
    MUST NOT import from domain/ or outer layers.

Invariants enforced:
    - Primary keys are uuid4 values kept in a 36-character string column,
      which behaves the same on PostgreSQL and SQLite.
    - ``Decimal`` attributes map to Numeric(38, 9); money is never a float
      column.
    - Tracked rows always record who created them.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import Date, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

MONEY = Numeric(38, 9)


class UUIDString(TypeDecorator):
    """A ``uuid.UUID`` in Python, its canonical text in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    """Every parks table has a uuid4 ``id`` primary key."""

    type_annotation_map: ClassVar[dict] = {
        PyUUID: UUIDString(),
        Decimal: MONEY,
        datetime: DateTime(timezone=True),
        date: Date,
        int: Integer,
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Adds database-side timestamps and the acting user's id.

    ``created_at`` is filled on insert; ``updated_at`` is refreshed on every
    update.  Services set ``updated_by_id`` when they modify a row.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )
    created_by_id: Mapped[PyUUID] = mapped_column(UUIDString())
    updated_by_id: Mapped[PyUUID | None] = mapped_column(UUIDString())


UUID = PyUUID
