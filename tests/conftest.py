"""
Test Suite Configuration
"""
import os

# Settings are cached on first use; pin the test environment before any import
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ANALYTICS_CACHE_ENABLED", "false")
os.environ.setdefault("ANALYTICS_TIMEZONE", "UTC")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "json")

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List, Optional

import jwt
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from merchant_analytics.analytics.frames import (
    order_items_frame,
    orders_frame,
    sales_orders_frame,
    timestamps_frame,
)
from merchant_analytics.config.settings import AnalyticsSettings
from merchant_analytics.database.models import Base


# Fixed clock for deterministic series: Wednesday 2024-05-15 14:30 UTC
NOW = datetime(2024, 5, 15, 14, 30)


# =============================================================================
# IN-MEMORY DATA SOURCE
# =============================================================================

@dataclass
class FakeItem:
    menu_id: int
    menu_name: str
    quantity: int
    subtotal: float


@dataclass
class FakeOrder:
    created_at: datetime
    total_amount: float
    status: str = "COMPLETED"
    currency: Optional[str] = "IDR"
    merchant_id: int = 1
    order_type: Optional[str] = "DINE_IN"
    payment_method: Optional[str] = "CASH_ON_COUNTER"
    placed_at: Optional[datetime] = None
    items: List[FakeItem] = field(default_factory=list)
    order_id: int = 0

    @property
    def placed(self) -> datetime:
        return self.placed_at or self.created_at


class FakeAnalyticsSource:
    """ChartDataSource and SalesDataSource over plain lists"""

    def __init__(self, orders=None, customers=None):
        self.orders: List[FakeOrder] = list(orders or [])
        self.customers: List[datetime] = list(customers or [])
        for i, order in enumerate(self.orders, start=1):
            order.order_id = order.order_id or i

    @staticmethod
    def _within(moment: datetime, start: datetime, end: Optional[datetime]) -> bool:
        return moment >= start and (end is None or moment < end)

    async def completed_orders_since(self, start):
        return orders_frame(
            (o.created_at, o.total_amount, o.currency)
            for o in self.orders
            if o.status == "COMPLETED" and o.created_at >= start
        )

    async def orders_since(self, start):
        return timestamps_frame(o.created_at for o in self.orders if o.created_at >= start)

    async def customers_since(self, start):
        return timestamps_frame(c for c in self.customers if c >= start)

    async def count_customers_before(self, start):
        return sum(1 for c in self.customers if c < start)

    async def count_customers_between(self, start, end):
        return sum(1 for c in self.customers if self._within(c, start, end))

    async def completed_order_totals(self, start, end):
        matched = [
            o for o in self.orders
            if o.status == "COMPLETED" and self._within(o.created_at, start, end)
        ]
        return float(sum(o.total_amount for o in matched)), len(matched)

    async def merchant_orders(self, merchant_id, start, end):
        return sales_orders_frame(
            (o.order_id, o.placed, o.status, o.order_type, o.total_amount, o.payment_method)
            for o in self.orders
            if o.merchant_id == merchant_id and start <= o.placed <= end
        )

    async def merchant_completed_items(self, merchant_id, start, end):
        return order_items_frame(
            (o.order_id, i.menu_id, i.menu_name, i.quantity, i.subtotal)
            for o in self.orders
            if o.merchant_id == merchant_id and o.status == "COMPLETED" and start <= o.placed <= end
            for i in o.items
        )


class FailingSource(FakeAnalyticsSource):
    """Every chart read fails"""

    async def completed_orders_since(self, start):
        raise RuntimeError("connection reset")

    async def merchant_orders(self, merchant_id, start, end):
        raise RuntimeError("connection reset")


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings(timezone="UTC", default_currency="IDR", cache_enabled=False)


@pytest.fixture
def sample_source() -> FakeAnalyticsSource:
    """A small mixed-currency data set around NOW"""
    orders = [
        FakeOrder(NOW - timedelta(days=1), 100.0, currency="IDR"),
        FakeOrder(NOW - timedelta(days=1), 50.0, currency="AUD"),
        FakeOrder(NOW - timedelta(days=3), 25.5, currency=None),
        FakeOrder(NOW - timedelta(days=3), 999.0, status="CANCELLED"),
        FakeOrder(NOW - timedelta(days=40), 200.0, currency="IDR"),
    ]
    customers = [
        NOW - timedelta(days=60),
        NOW - timedelta(days=45),
        NOW - timedelta(days=2),
        NOW - timedelta(days=1),
        NOW - timedelta(days=1),
    ]
    return FakeAnalyticsSource(orders, customers)


def make_token(role: str = "SUPER_ADMIN", merchant_id: Optional[int] = None, sub: str = "1", **extra) -> str:
    claims = {"sub": sub, "role": role, "exp": datetime.now(timezone.utc) + timedelta(hours=1), **extra}
    if merchant_id is not None:
        claims["merchant_id"] = merchant_id
    return jwt.encode(claims, os.environ["JWT_SECRET_KEY"], algorithm="HS256")


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict:
    return auth_header(make_token("SUPER_ADMIN"))


@pytest.fixture
def merchant_headers() -> dict:
    return auth_header(make_token("MERCHANT_OWNER", merchant_id=1))


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine shared across connections"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()
