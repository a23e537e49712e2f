"""
Module: parks_kernel.db.engine
Responsibility: Own the process-wide SQLAlchemy engine and session factory
    for the parks database, and provide the commit-or-rollback
    ``session_scope``.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import parks_modules; module models are registered by
    parks_modules.orm_registry before create_tables() runs.

Invariants enforced:
    - One engine per process; ``init_engine_from_url`` replaces it.
    - PostgreSQL: pooled connections, pre-ping, READ COMMITTED.
    - SQLite (tests, local reports): a single shared connection so an
      in-memory database is visible to every session, with foreign keys
      switched on.
    - Sessions keep loaded attributes after commit (expire_on_commit=False),
      so services can return domain objects built from committed rows.

Failure modes:
    - RuntimeError when the engine or a session is requested before
      init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from parks_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Database engine not initialized. Call init_engine_from_url() first."


def _sqlite_foreign_keys_on(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "poolclass": QueuePool,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "isolation_level": "READ COMMITTED",
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Args:
        database_url: ``postgresql://...`` or ``sqlite:///...`` URL.
        echo: Log every SQL statement through SQLAlchemy.
        pool_size: Pooled PostgreSQL connections (ignored for SQLite).
        max_overflow: Extra PostgreSQL connections beyond the pool.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    engine = create_engine(
        database_url,
        echo=echo,
        **_engine_options(database_url, pool_size, max_overflow),
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _sqlite_foreign_keys_on)

    _engine = engine
    _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)

    logger.info("engine_initialized", extra={
        "dialect": engine.dialect.name,
        "echo": echo,
    })
    return engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session() -> Session:
    """A new session bound to the current engine; the caller closes it."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Commit on normal exit, roll back and re-raise on error, always close.

    Usage:
        with session_scope() as session:
            BudgetService(session).create_budget(...)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every table registered on ``Base.metadata``.

    Module ORM models must already be imported; use
    ``parks_modules.orm_registry.create_all_tables()`` for a complete schema.
    """
    from parks_kernel.db.base import Base

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"table_count": len(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every registered table (tests and local resets only)."""
    from parks_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory (test cleanup)."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


def is_postgres() -> bool:
    return _engine is not None and _engine.dialect.name == "postgresql"


atexit.register(reset_engine)
