"""Pytest fixtures for the orders service tests."""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.data.database import Base, get_db
from app.data import models  # noqa: F401
from app.data.models import ProductModel
from app.services.rate_limiter import RateLimiter

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False)


class RecordingNotifications:
    """Collects post-commit hooks instead of enqueueing Celery tasks."""

    def __init__(self):
        self.screenings = []
        self.shipments = []

    def request_fraud_screening(self, order_id):
        self.screenings.append(order_id)

    def notify_shipment(self, order_id, tracking_number, carrier=None):
        self.shipments.append((order_id, tracking_number))


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def products(db):
    """Catalog: 1 @ 10.00 (stock 5), 2 @ 5.50 (stock 3), 3 @ 20.00 (stock 1)."""
    db.add_all(
        [
            ProductModel(id=1, name="Sadu Rug", price=Decimal("10.00"), stock=5),
            ProductModel(id=2, name="Dallah", price=Decimal("5.50"), stock=3),
            ProductModel(id=3, name="Calligraphy Print", price=Decimal("20.00"), stock=1),
        ]
    )
    db.commit()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.eval.return_value = 1
    return client


@pytest.fixture
def client(db, notifications, redis_client):
    from app.api.deps import get_notifications, get_rate_limiter
    from app.main import app

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifications] = lambda: notifications
    app.dependency_overrides[get_rate_limiter] = lambda: RateLimiter(client=redis_client)

    yield TestClient(app)

    app.dependency_overrides.clear()

