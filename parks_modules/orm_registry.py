"""
Module ORM Registry (``parks_modules.orm_registry``).

Responsibility
--------------
Ensure every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` contains its table definitions before
``parks_kernel.db.create_tables()`` runs, and provide
``create_all_tables()``, the entry point scripts and tests use for a
complete schema.

Architecture position
---------------------
**Modules layer** -- utility.  Imports module ORM packages and
``parks_kernel.db.engine`` (allowed: modules -> kernel).  MUST NOT be
imported by ``parks_kernel``.
"""


def import_all_orm_models() -> None:
    """Import every ``parks_modules.*.orm`` module.  Idempotent."""
    import parks_modules.budget.orm  # noqa: F401


def create_all_tables() -> None:
    """Register every module ORM model, then create all tables."""
    from parks_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
