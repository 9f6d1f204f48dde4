"""
Pytest fixtures for testing
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.infrastructure.db.session import Base
from app.infrastructure.db import models  # noqa: F401  (registers tables)
from app.infrastructure.db.models import User, SubscriptionModel, TransactionModel


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def user(db_session) -> User:
    u = User(email="owner@example.com", password_hash="x", name="Owner")
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture
def other_user(db_session) -> User:
    u = User(email="other@example.com", password_hash="x", name="Other")
    db_session.add(u)
    db_session.commit()
    return u


def make_subscription(db, user_id, **overrides) -> SubscriptionModel:
    """Insert a subscription row directly (bypasses validation)."""
    fields = dict(
        service_name="Netflix",
        plan_type="Premium",
        cost=Decimal("15.99"),
        billing_cycle="monthly",
        next_billing_date=date(2026, 1, 15),
        status="active",
        category="entertainment",
        payment_method="credit_card",
        auto_renewal=True,
    )
    fields.update(overrides)
    sub = SubscriptionModel(user_id=user_id, **fields)
    db.add(sub)
    db.commit()
    return sub


def make_transaction(db, subscription_id, amount, status="completed", paid_on=date(2025, 12, 15)) -> TransactionModel:
    tx = TransactionModel(
        subscription_id=subscription_id,
        amount=Decimal(str(amount)),
        date=paid_on,
        payment_method="credit_card",
        status=status,
    )
    db.add(tx)
    db.commit()
    return tx


@pytest.fixture
def client(db_session):
    """Test client with get_db bound to the test session"""
    from app.main import app
    from app.api.deps import get_db

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user):
    """Bearer header for ``user``"""
    from app.tokens import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def subscription_factory(db_session):
    def _make(user_id, **overrides):
        return make_subscription(db_session, user_id, **overrides)
    return _make


@pytest.fixture
def transaction_factory(db_session):
    def _make(subscription_id, amount, **kwargs):
        return make_transaction(db_session, subscription_id, amount, **kwargs)
    return _make
