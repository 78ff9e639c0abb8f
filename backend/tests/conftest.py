"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before any project import builds the engine or settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORE_TIMEZONE", "UTC")
os.environ.setdefault("QUEUE_RESET_TIME", "00:00")
os.environ.setdefault("RETRY_INITIAL_DELAY", "0.001")
os.environ.setdefault("RETRY_MAX_DELAY", "0.01")

from datetime import datetime, time, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, Product, User
from rest_api.services.domain import ServiceClock, get_service_clock
from shared.config.constants import Roles
from shared.infrastructure.db import build_engine, get_db


# SQLite in-memory database shared by every session of a test
engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


class FrozenNow:
    """Callable clock source that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def frozen_now():
    """Clock source pinned at 2026-03-02 15:00 UTC."""
    return FrozenNow(datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc))


@pytest.fixture
def clock(frozen_now):
    """UTC store, midnight reset, pinned time."""
    return ServiceClock("UTC", time(0, 0), now_fn=frozen_now)


@pytest.fixture(scope="function")
def client(db_session, clock):
    """
    Create a test client with database session and clock overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_service_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def seed_cashier(db_session):
    """Create an active cashier."""
    cashier = User(username="cashier1", role=Roles.CASHIER, is_active=True)
    db_session.add(cashier)
    db_session.commit()
    return cashier


@pytest.fixture
def make_product(db_session):
    """Factory creating committed products."""

    def _make(name="Burger", price_cents=1000, stock_quantity=10, is_active=True):
        product = Product(
            name=name,
            price_cents=price_cents,
            stock_quantity=stock_quantity,
            is_active=is_active,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture
def file_engine(tmp_path):
    """
    File-backed SQLite engine for tests that run several threads.
    Each thread opens its own connection; BEGIN IMMEDIATE serialises writers.
    """
    file_db = build_engine(f"sqlite:///{tmp_path / 'counter_pos.db'}")
    Base.metadata.create_all(bind=file_db)
    try:
        yield file_db
    finally:
        file_db.dispose()


@pytest.fixture
def file_sessions(file_engine):
    return sessionmaker(
        bind=file_engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
