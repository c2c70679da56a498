"""
Pytest configuration and shared fixtures for Deliveries service tests.

Provides an in-memory SQLite DB, a recording stand-in for the event bus,
and an ASGI test client with both wired in through dependency overrides.
"""
import pytest
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import db_models  # noqa: F401  (registers tables on Base.metadata)
from main import app
from database import Base, get_db
from deps import get_event_bus
from services.delivery_service import DeliveryService
from services.delivery_store import DeliveryStore


class RecordingEventBus:
    """Stands in for EventBusClient; keeps every event instead of sending it."""

    def __init__(self):
        self.published: list[dict] = []

    def publish_detached(self, event: dict):
        self.published.append(event)
        return None

    def types(self) -> list[str]:
        return [e["type"] for e in self.published]

    def get_status(self) -> dict:
        return {"subscribed": False, "published_total": len(self.published)}


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


# ── Service Fixtures ─────────────────────────────────────────────────


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def store(db_session: AsyncSession) -> DeliveryStore:
    return DeliveryStore(db_session)


@pytest.fixture
def service(store: DeliveryStore, event_bus: RecordingEventBus) -> DeliveryService:
    return DeliveryService(store, event_bus)


@pytest.fixture
async def client(db_session: AsyncSession, event_bus: RecordingEventBus):
    """
    ASGI test client with the in-memory DB and recording bus.

    The app lifespan is not run, so nothing subscribes to a real bus.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: event_bus

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest.fixture
def order_request() -> dict:
    """Body a client posts to /api/delivery/create."""
    return {"userId": "u1", "time": "12:00", "foods": ["pizza"], "totalPrice": 15}


@pytest.fixture
def processed_order(order_request: dict) -> dict:
    """OrderProcessed payload as the orders service relays it back, paid for."""
    return {**order_request, "type": "delivery", "status": "ordered"}


@pytest.fixture
def order_processed_event(processed_order: dict) -> dict:
    return {"type": "OrderProcessed", "data": processed_order}
