"""
Merchant Sales Analytics

Per-merchant report over orders placed in a resolved range: summary,
daily revenue trend, top selling items, hourly distribution and breakdowns
by status, payment method and order type. Revenue figures only count
completed orders.
"""

from typing import List
from zoneinfo import ZoneInfo

import polars as pl
import structlog

from merchant_analytics.analytics.aggregators import HOURS_PER_DAY, localize
from merchant_analytics.analytics.bucketing import Granularity
from merchant_analytics.analytics.datasource import SalesDataSource
from merchant_analytics.analytics.periods import SalesRange
from merchant_analytics.analytics.schemas import (
    OrderTypeBreakdown,
    PaymentMethodBreakdown,
    PeakHour,
    RevenueTrendPoint,
    SalesAnalytics,
    SalesSummary,
    StatusBreakdown,
    TopSellingItem,
)
from merchant_analytics.config.settings import AnalyticsSettings
from merchant_analytics.database.models import OrderStatus

logger = structlog.get_logger(__name__)


def _share(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0


class SalesAnalyticsService:
    """Builds a merchant's sales report from a SalesDataSource"""

    def __init__(self, source: SalesDataSource, settings: AnalyticsSettings):
        self.source = source
        self.settings = settings
        self.zone = ZoneInfo(settings.timezone)

    async def build(self, merchant_id: int, sales_range: SalesRange) -> SalesAnalytics:
        orders = localize(
            await self.source.merchant_orders(merchant_id, sales_range.start, sales_range.end),
            self.settings.timezone,
            column="placed_at",
        )
        items = await self.source.merchant_completed_items(merchant_id, sales_range.start, sales_range.end)
        completed = orders.filter(pl.col("status") == OrderStatus.COMPLETED.value)

        logger.debug(
            "Building sales analytics",
            merchant_id=merchant_id,
            period=sales_range.period,
            orders=len(orders),
            completed=len(completed),
        )

        return SalesAnalytics(
            summary=self.summarize(orders, completed),
            revenue_trend=self.revenue_trend(completed),
            top_selling_items=self.top_selling_items(items),
            peak_hours=self.peak_hours(completed),
            orders_by_status=self.orders_by_status(orders),
            payment_methods=self.payment_methods(completed),
            order_types=self.order_types(completed),
        )

    def summarize(self, orders: pl.DataFrame, completed: pl.DataFrame) -> SalesSummary:
        total_revenue = float(completed["total_amount"].sum() or 0)
        cancelled = orders.filter(pl.col("status") == OrderStatus.CANCELLED.value)
        return SalesSummary(
            total_revenue=total_revenue,
            total_orders=len(orders),
            average_order_value=total_revenue / len(completed) if len(completed) > 0 else 0,
            completed_orders=len(completed),
            cancelled_orders=len(cancelled),
            completion_rate=_share(len(completed), len(orders)),
        )

    def revenue_trend(self, completed: pl.DataFrame) -> List[RevenueTrendPoint]:
        """Daily revenue, only for days with completed orders."""
        trend = (
            completed.group_by(Granularity.DAY.key_expr("placed_at").alias("date"))
            .agg(
                pl.col("total_amount").sum().alias("revenue"),
                pl.len().alias("orders"),
            )
            .sort("date")
        )
        return [RevenueTrendPoint(**row) for row in trend.iter_rows(named=True)]

    def top_selling_items(self, items: pl.DataFrame) -> List[TopSellingItem]:
        """Items ranked by quantity sold, revenue share over all sold items."""
        per_item = (
            items.group_by("menu_id")
            .agg(
                pl.col("menu_name").first(),
                pl.col("quantity").sum(),
                pl.col("subtotal").sum().alias("revenue"),
            )
            .sort(["quantity", "menu_id"], descending=[True, False])
        )
        total_item_revenue = float(per_item["revenue"].sum() or 0)
        return [
            TopSellingItem(
                menu_id=str(row["menu_id"]),
                menu_name=row["menu_name"],
                quantity=row["quantity"],
                revenue=row["revenue"],
                percentage=_share(row["revenue"], total_item_revenue),
            )
            for row in per_item.head(self.settings.top_selling_limit).iter_rows(named=True)
        ]

    def peak_hours(self, completed: pl.DataFrame) -> List[PeakHour]:
        """Completed orders and revenue for each of the 24 hours."""
        hourly = (
            completed.group_by(pl.col("placed_at").dt.hour().alias("hour"))
            .agg(
                pl.len().alias("orders"),
                pl.col("total_amount").sum().alias("revenue"),
            )
        )
        by_hour = {row["hour"]: row for row in hourly.iter_rows(named=True)}
        return [
            PeakHour(
                hour=hour,
                orders=by_hour[hour]["orders"] if hour in by_hour else 0,
                revenue=by_hour[hour]["revenue"] if hour in by_hour else 0,
            )
            for hour in range(HOURS_PER_DAY)
        ]

    def orders_by_status(self, orders: pl.DataFrame) -> List[StatusBreakdown]:
        counts = (
            orders.group_by("status")
            .agg(pl.len().alias("count"))
            .sort(["count", "status"], descending=[True, False])
        )
        return [
            StatusBreakdown(
                status=row["status"],
                count=row["count"],
                percentage=_share(row["count"], len(orders)),
            )
            for row in counts.iter_rows(named=True)
        ]

    def payment_methods(self, completed: pl.DataFrame) -> List[PaymentMethodBreakdown]:
        """Completed orders by payment method; orders without a payment are UNKNOWN."""
        counts = (
            completed.with_columns(pl.col("payment_method").fill_null("UNKNOWN"))
            .group_by("payment_method")
            .agg(
                pl.len().alias("count"),
                pl.col("total_amount").sum().alias("revenue"),
            )
            .sort(["count", "payment_method"], descending=[True, False])
        )
        return [
            PaymentMethodBreakdown(
                method=row["payment_method"],
                count=row["count"],
                revenue=row["revenue"],
                percentage=_share(row["count"], len(completed)),
            )
            for row in counts.iter_rows(named=True)
        ]

    def order_types(self, completed: pl.DataFrame) -> List[OrderTypeBreakdown]:
        counts = (
            completed.with_columns(pl.col("order_type").fill_null("UNKNOWN"))
            .group_by("order_type")
            .agg(
                pl.len().alias("count"),
                pl.col("total_amount").sum().alias("revenue"),
            )
            .sort(["count", "order_type"], descending=[True, False])
        )
        return [
            OrderTypeBreakdown(
                type=row["order_type"],
                count=row["count"],
                revenue=row["revenue"],
                percentage=_share(row["count"], len(completed)),
            )
            for row in counts.iter_rows(named=True)
        ]
