"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.

PostgreSQL is the deployment target. SQLite is supported for local runs and
tests; its connections are switched to BEGIN IMMEDIATE transactions so that
concurrent writers queue on the database lock instead of failing mid-way.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import settings, DATABASE_URL


def _configure_sqlite(engine: Engine) -> None:
    """Take the write lock at BEGIN and enforce foreign keys."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, **engine_kwargs: Any) -> Engine:
    """
    Create an engine with the pool and timeout policy for the URL's backend.

    Extra keyword arguments are passed to create_engine (tests use this to
    select StaticPool for in-memory SQLite).
    """
    if url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout_seconds,
        }
        engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        _configure_sqlite(engine)
        return engine

    options = (
        f"-c statement_timeout={settings.db_statement_timeout_ms} "
        f"-c lock_timeout={settings.db_lock_timeout_ms}"
    )
    engine_kwargs.setdefault("pool_size", settings.db_pool_size)
    engine_kwargs.setdefault("max_overflow", settings.db_max_overflow)
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_timeout=30,  # Wait max 30s for connection from pool
        pool_recycle=1800,  # Recycle connections after 30 minutes
        connect_args={"connect_timeout": 10, "options": options},
        echo=False,
        **engine_kwargs,
    )


engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/orders")
        def list_orders(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            QueueService(db).issue_ticket("Ana")
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def is_transient_error(exc: BaseException) -> bool:
    """
    True for storage errors worth retrying: lock/statement timeouts,
    serialization failures, deadlocks, dropped connections, a busy SQLite file.
    """
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated
