"""
Infrastructure module: database sessions, retries, request correlation.

Provides:
- Database engine, sessions and transactions (db.py)
- Bounded retry with backoff for transient storage failures (retry.py)
- Correlation IDs for request tracing (correlation.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    build_engine,
    get_db,
    get_db_context,
    safe_commit,
    is_transient_error,
)
from shared.infrastructure.retry import RetryConfig, run_with_retry

__all__ = [
    # db
    "engine",
    "SessionLocal",
    "build_engine",
    "get_db",
    "get_db_context",
    "safe_commit",
    "is_transient_error",
    # retry
    "RetryConfig",
    "run_with_retry",
]
