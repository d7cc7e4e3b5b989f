"""
Analytics data sources.

The aggregation services depend on the protocols below rather than on a
database handle. `SqlAlchemyAnalyticsSource` implements both over the
request's AsyncSession; tests substitute in-memory sources.

All bounds are naive UTC. `end=None` leaves a range open-ended.
"""

from datetime import datetime
from typing import Optional, Protocol, Tuple

import polars as pl
import structlog
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from merchant_analytics.analytics.frames import (
    order_items_frame,
    orders_frame,
    sales_orders_frame,
    timestamps_frame,
)
from merchant_analytics.database.models import (
    Customer,
    Merchant,
    Order,
    OrderItem,
    OrderStatus,
    Payment,
)

logger = structlog.get_logger(__name__)


class ChartDataSource(Protocol):
    """Reads behind the super-admin dashboard charts"""

    async def completed_orders_since(self, start: datetime) -> pl.DataFrame:
        """Completed orders created at or after `start` (created_at, total_amount, currency)."""
        ...

    async def orders_since(self, start: datetime) -> pl.DataFrame:
        """Orders of any status created at or after `start` (created_at)."""
        ...

    async def customers_since(self, start: datetime) -> pl.DataFrame:
        """Customers created at or after `start` (created_at)."""
        ...

    async def count_customers_before(self, start: datetime) -> int:
        """Customers created strictly before `start`."""
        ...

    async def count_customers_between(self, start: datetime, end: Optional[datetime]) -> int:
        ...

    async def completed_order_totals(self, start: datetime, end: Optional[datetime]) -> Tuple[float, int]:
        """Revenue and count of completed orders created in [start, end)."""
        ...


class SalesDataSource(Protocol):
    """Reads behind a merchant's sales report"""

    async def merchant_orders(self, merchant_id: int, start: datetime, end: datetime) -> pl.DataFrame:
        """
        Orders placed in [start, end]
        (order_id, placed_at, status, order_type, total_amount, payment_method).
        """
        ...

    async def merchant_completed_items(self, merchant_id: int, start: datetime, end: datetime) -> pl.DataFrame:
        """Items of completed orders placed in [start, end]."""
        ...


def _created_between(column, start: datetime, end: Optional[datetime]):
    if end is None:
        return column >= start
    return and_(column >= start, column < end)


class SqlAlchemyAnalyticsSource:
    """ChartDataSource and SalesDataSource over an AsyncSession"""

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- charts ---------------------------------------------------------------

    async def completed_orders_since(self, start: datetime) -> pl.DataFrame:
        result = await self.session.execute(
            select(Order.created_at, Order.total_amount, Merchant.currency)
            .outerjoin(Merchant, Order.merchant_id == Merchant.id)
            .where(
                and_(
                    Order.created_at >= start,
                    Order.status == OrderStatus.COMPLETED,
                )
            )
            .order_by(Order.created_at)
        )
        rows = result.all()
        logger.debug("Fetched completed orders", count=len(rows), start=str(start))
        return orders_frame(rows)

    async def orders_since(self, start: datetime) -> pl.DataFrame:
        result = await self.session.execute(
            select(Order.created_at).where(Order.created_at >= start)
        )
        return timestamps_frame(result.scalars().all())

    async def customers_since(self, start: datetime) -> pl.DataFrame:
        result = await self.session.execute(
            select(Customer.created_at)
            .where(Customer.created_at >= start)
            .order_by(Customer.created_at)
        )
        return timestamps_frame(result.scalars().all())

    async def count_customers_before(self, start: datetime) -> int:
        count = await self.session.scalar(
            select(func.count(Customer.id)).where(Customer.created_at < start)
        )
        return count or 0

    async def count_customers_between(self, start: datetime, end: Optional[datetime]) -> int:
        count = await self.session.scalar(
            select(func.count(Customer.id)).where(
                _created_between(Customer.created_at, start, end)
            )
        )
        return count or 0

    async def completed_order_totals(self, start: datetime, end: Optional[datetime]) -> Tuple[float, int]:
        result = await self.session.execute(
            select(
                func.sum(Order.total_amount).label("revenue"),
                func.count(Order.id).label("orders"),
            ).where(
                and_(
                    _created_between(Order.created_at, start, end),
                    Order.status == OrderStatus.COMPLETED,
                )
            )
        )
        row = result.one()
        return float(row.revenue or 0), row.orders or 0

    # -- merchant sales -------------------------------------------------------

    async def merchant_orders(self, merchant_id: int, start: datetime, end: datetime) -> pl.DataFrame:
        result = await self.session.execute(
            select(
                Order.id,
                Order.placed_at,
                Order.status,
                Order.order_type,
                Order.total_amount,
                Payment.payment_method,
            )
            .outerjoin(Payment, Payment.order_id == Order.id)
            .where(
                and_(
                    Order.merchant_id == merchant_id,
                    Order.placed_at >= start,
                    Order.placed_at <= end,
                )
            )
            .order_by(Order.placed_at)
        )
        return sales_orders_frame(result.all())

    async def merchant_completed_items(self, merchant_id: int, start: datetime, end: datetime) -> pl.DataFrame:
        result = await self.session.execute(
            select(
                OrderItem.order_id,
                OrderItem.menu_id,
                OrderItem.menu_name,
                OrderItem.quantity,
                OrderItem.subtotal,
            )
            .join(Order, OrderItem.order_id == Order.id)
            .where(
                and_(
                    Order.merchant_id == merchant_id,
                    Order.status == OrderStatus.COMPLETED,
                    Order.placed_at >= start,
                    Order.placed_at <= end,
                )
            )
        )
        return order_items_frame(result.all())
