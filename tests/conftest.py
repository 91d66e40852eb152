"""
Pytest global configuration for the mpay24 gateway.

- SQLite in-memory database per test (TEST_DATABASE_URL overrides it)
- mpay24, the scheduler and the event bus replaced by recording fakes
- FastAPI TestClient with those fakes injected through dependency_overrides
"""

from dotenv import load_dotenv
import os
import pytest

load_dotenv(".env.test")
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_DEV_MODE", "true")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("EVENT_BACKEND", "memory")

from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

import mpay24_gateway.database.session as db_session_module
from mpay24_gateway.database.session import Base
import mpay24_gateway.database.models  # noqa: F401 - registers all models in Base.metadata
from mpay24_gateway.api.dependencies import get_bus, get_provider_factory, get_task_manager
from mpay24_gateway.api.main import app
from mpay24_gateway.core.events import WILDCARD, Event, EventBus
from mpay24_gateway.core.services.gateway_service import save_gateway_configuration
from mpay24_gateway.core.services.scheduler_service import AdhocTask, TaskManager
from mpay24_gateway.payments.base import ClientToken, PaymentProvider, PaymentStatus
from mpay24_gateway.payments.helper import Payable, ServiceProvider, get_service_provider_registry

COMPONENT = "local_shopping_cart"
PAYMENT_AREA = "main"
ACCOUNT_ID = 1


# ============================================================================
# FAKES
# ============================================================================

class RecordingTaskManager(TaskManager):
    """Keeps queued tasks by identity, replacing on re-queue like the real one."""

    def __init__(self):
        self.calls: List[AdhocTask] = []
        self.queued: Dict[str, AdhocTask] = {}

    def reschedule_or_queue(self, task: AdhocTask) -> None:
        self.calls.append(task)
        self.queued[task.identity] = task


class FakeProvider(PaymentProvider):
    def __init__(self, client_id: str, secret: str, environment: Optional[str], statuses: Dict[str, str]):
        self.client_id = client_id
        self.secret = secret
        self.environment = environment
        self.statuses = statuses

    def get_name(self) -> str:
        return "fake"

    def create_client_token(self, payment_type: str = "CC") -> ClientToken:
        return ClientToken(
            location="https://test.mpay24.com/app/bin/checkout/payment/abc123",
            token="tok%2Babc%3D",
        )

    def verify_payment(self, external_id: str) -> PaymentStatus:
        status = self.statuses.get(external_id, "pending")
        raw = {"confirmed": "BILLED", "failed": "ERROR"}.get(status, "SUSPENDED")
        return PaymentStatus(external_id=external_id, status=status, raw_status=raw)


class FakeProviderFactory:
    def __init__(self):
        self.created: List[FakeProvider] = []
        self.statuses: Dict[str, str] = {}

    def __call__(self, client_id: str, secret: str, environment: Optional[str]) -> FakeProvider:
        provider = FakeProvider(client_id, secret, environment, self.statuses)
        self.created.append(provider)
        return provider


class CartServiceProvider(ServiceProvider):
    """Items priced in a dict; prices can change between checkouts."""

    def __init__(self, prices: Dict[int, Tuple[Decimal, str]]):
        self.prices = prices

    def get_payable(self, payment_area: str, item_id: int) -> Optional[Payable]:
        if payment_area != PAYMENT_AREA or item_id not in self.prices:
            return None
        amount, currency = self.prices[item_id]
        return Payable(amount=amount, currency=currency, account_id=ACCOUNT_ID)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    Test engine swapped in for the global engine used by get_db()/get_session().
    """
    database_url = os.environ["DATABASE_URL"]
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        # Let SQLAlchemy drive BEGIN/SAVEPOINT instead of pysqlite
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")
    else:
        engine = create_engine(database_url)

    Base.metadata.create_all(bind=engine)

    original_engine = db_session_module.engine
    original_factory = db_session_module.SessionLocal
    db_session_module.engine = engine
    db_session_module.SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )

    yield engine

    db_session_module.engine = original_engine
    db_session_module.SessionLocal = original_factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_db_engine):
    """Factory for short-lived sessions (seed data, assertions)."""
    return db_session_module.SessionLocal


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


# ============================================================================
# COLLABORATOR FIXTURES
# ============================================================================

@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def published(bus) -> List[Event]:
    """Every event published on the test bus."""
    events: List[Event] = []
    bus.subscribe(WILDCARD, events.append)
    return events


@pytest.fixture
def task_manager():
    return RecordingTaskManager()


@pytest.fixture
def provider_factory():
    return FakeProviderFactory()


@pytest.fixture
def cart_prices():
    return {
        42: (Decimal("10.00"), "EUR"),
        43: (Decimal("99.99"), "EUR"),
        77: (Decimal("1500"), "JPY"),
    }


@pytest.fixture
def cart_provider(cart_prices):
    registry = get_service_provider_registry()
    provider = CartServiceProvider(cart_prices)
    registry.register(COMPONENT, provider)
    yield provider
    registry.unregister(COMPONENT)


@pytest.fixture
def gateway_account(session_factory):
    """Enabled sandbox configuration for ACCOUNT_ID."""
    data = {
        "brandname": "Wunder Academy",
        "clientid": "93975",
        "secret": "soap-password",
        "environment": "sandbox",
        "enabled": True,
    }
    with session_factory() as session:
        errors = save_gateway_configuration(session, ACCOUNT_ID, data)
        session.commit()
    assert errors == {}
    return data


# ============================================================================
# FASTAPI CLIENT
# ============================================================================

@pytest.fixture(scope="function")
def test_client(test_db_engine, task_manager, provider_factory, bus):
    """TestClient on the test database with fake collaborators injected."""
    app.dependency_overrides[get_task_manager] = lambda: task_manager
    app.dependency_overrides[get_provider_factory] = lambda: provider_factory
    app.dependency_overrides[get_bus] = lambda: bus
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
