"""Shared test fixtures for the storefront test suite.

Uses an in-memory SQLite database with StaticPool so all sessions share the
same connection (committed data is visible across sessions).
"""

import json
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.config import Settings
from storefront.database import Base, get_db, register_sqlite_functions
from storefront.main import create_app
from storefront.models import *  # noqa: ensure all models are loaded for create_all


# ---------------------------------------------------------------------------
# In-memory SQLite test engine (shared via StaticPool)
# ---------------------------------------------------------------------------

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)
TestSession = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()
    register_sqlite_functions(dbapi_conn)


test_settings = Settings(
    environment="test",
    database_url="sqlite+aiosqlite:///:memory:",
    cors_origins="http://localhost:3000",
    telegram_bot_token="",
    telegram_chat_id="",
)
app = create_app(test_settings)

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Auto-use: create/drop tables for every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def db():
    """Yield a fresh AsyncSession for direct service-layer tests."""
    async with TestSession() as session:
        yield session


@pytest.fixture
def test_app():
    return app


@pytest.fixture
def notifier():
    """Replace the app's Telegram notifier with a mock for one test."""
    original = app.state.notifier
    mock = MagicMock()
    mock.enabled = True
    mock.send_order_notification = AsyncMock(return_value=True)
    mock.send_status_update = AsyncMock(return_value=True)
    app.state.notifier = mock
    yield mock
    app.state.notifier = original


@pytest.fixture
async def client():
    """httpx AsyncClient wired to the FastAPI app with test DB override."""
    import httpx

    async def _override_get_db():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------

def _new_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def make_order(db: AsyncSession):
    """Factory fixture: create an Order; ``minutes`` offsets order_date from BASE_TIME."""
    from storefront.models.order import Order

    async def _make(minutes: int = 0, **kwargs):
        order = Order(
            id=kwargs.get("id", _new_id()),
            customer_name=kwargs.get("customer_name", f"Customer {_new_id()[:6]}"),
            customer_phone=kwargs.get("customer_phone", "+998900000000"),
            customer_address=kwargs.get("customer_address", "Toshkent"),
            items=json.dumps(kwargs.get("items", [{"name": "Sement", "price": 65000, "quantity": 2}])),
            total_amount=Decimal(str(kwargs.get("total_amount", 130000))),
            status=kwargs.get("status", "pending"),
            order_date=BASE_TIME + timedelta(minutes=minutes),
        )
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    return _make


@pytest.fixture
def make_product(db: AsyncSession):
    """Factory fixture: create a Product; ``minutes`` offsets created_at from BASE_TIME."""
    from storefront.models.product import Product

    async def _make(minutes: int = 0, **kwargs):
        product = Product(
            id=kwargs.get("id", _new_id()),
            name=kwargs.get("name", f"Product {_new_id()[:6]}"),
            price=Decimal(str(kwargs.get("price", 10000))),
            description=kwargs.get("description", ""),
            category=kwargs.get("category", "sement"),
            images=json.dumps(kwargs.get("images", [])),
            stock=kwargs.get("stock", 10),
            badge=kwargs.get("badge"),
            is_new=kwargs.get("is_new", False),
            is_popular=kwargs.get("is_popular", False),
            status=kwargs.get("status", "active"),
            is_deleted=kwargs.get("is_deleted", False),
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_craftsman(db: AsyncSession):
    """Factory fixture: create a Craftsman; ``minutes`` offsets join_date from BASE_TIME."""
    from storefront.models.craftsman import Craftsman

    async def _make(minutes: int = 0, **kwargs):
        craftsman = Craftsman(
            id=kwargs.get("id", _new_id()),
            name=kwargs.get("name", f"Usta {_new_id()[:6]}"),
            specialty=kwargs.get("specialty", "Elektrik"),
            phone=kwargs.get("phone", "+998901234567"),
            status=kwargs.get("status", "active"),
            join_date=BASE_TIME + timedelta(minutes=minutes),
        )
        db.add(craftsman)
        await db.commit()
        await db.refresh(craftsman)
        return craftsman

    return _make


# ---------------------------------------------------------------------------
# In-memory Collection for storage-independent ListingQuery tests
# ---------------------------------------------------------------------------

class InMemoryCollection:
    """Collection over a list of dicts with the same matching rules as SQL."""

    def __init__(self, records: list[dict]):
        self.records = list(records)
        self.calls: list[str] = []

    @staticmethod
    def _compare(actual, comparison) -> bool:
        if actual is None:
            return False
        if comparison.op == "gt":
            return actual > comparison.value
        if comparison.op == "ge":
            return actual >= comparison.value
        if comparison.op == "le":
            return actual <= comparison.value
        return str(actual).lower() == str(comparison.value).lower()

    def _matches(self, record: dict, listing_filter) -> bool:
        for field, value in listing_filter.equals:
            if record.get(field) != value:
                return False
        for comparison in listing_filter.comparisons:
            if not self._compare(record.get(comparison.field), comparison):
                return False
        if listing_filter.status is not None and record.get(listing_filter.status_field) != listing_filter.status:
            return False
        if listing_filter.search_term:
            term = listing_filter.search_term.casefold()
            if not any(term in str(record.get(f) or "").casefold() for f in listing_filter.search_fields):
                return False
        return True

    async def count_matching(self, listing_filter) -> int:
        self.calls.append("count")
        return sum(1 for r in self.records if self._matches(r, listing_filter))

    async def find_matching(self, listing_filter, sort, skip, limit) -> list[dict]:
        self.calls.append("find")
        rows = [r for r in self.records if self._matches(r, listing_filter)]
        for key in reversed(sort):
            rows.sort(key=lambda r: r[key.field], reverse=key.descending)
        return rows[skip:skip + limit]


@pytest.fixture
def memory_collection():
    """Factory fixture: build an InMemoryCollection from records."""
    return InMemoryCollection
