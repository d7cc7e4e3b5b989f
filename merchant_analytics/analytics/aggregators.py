"""
Chart Aggregators

Pure passes over record frames producing chart series:

- aggregate_revenue: completed orders -> revenue/order-count buckets, combined
  and per currency
- densify_revenue: bucket map -> contiguous series with zero-filled gaps
- customer_growth: daily new customers with a running total
- activity_heatmap: 7 x 24 (day of week x hour) order counts

Frames carry local (reporting-zone) timestamps; see `localize`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Mapping

import polars as pl

from merchant_analytics.analytics.bucketing import (
    Granularity,
    day_of_week_expr,
    localize_expr,
)
from merchant_analytics.analytics.schemas import (
    CurrencyRevenue,
    CustomerGrowthPoint,
    HeatmapCell,
    RevenuePoint,
)

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


def localize(frame: pl.DataFrame, zone_name: str, column: str = "created_at") -> pl.DataFrame:
    """Convert a naive UTC timestamp column to naive local time."""
    return frame.with_columns(localize_expr(column, zone_name))


def bucket_counts(frame: pl.DataFrame, granularity: Granularity, column: str = "created_at") -> Dict[str, int]:
    """Count rows per bucket key."""
    counts = (
        frame.group_by(granularity.key_expr(column).alias("bucket"))
        .agg(pl.len().alias("count"))
    )
    return {row["bucket"]: row["count"] for row in counts.iter_rows(named=True)}


# =============================================================================
# REVENUE
# =============================================================================

@dataclass
class BucketTotals:
    """Accumulated revenue and order count of one bucket"""
    revenue: float = 0.0
    order_count: int = 0

    def add(self, revenue: float, order_count: int) -> None:
        self.revenue += revenue
        self.order_count += order_count


@dataclass
class RevenueAggregation:
    """
    Revenue buckets, combined and split by merchant currency.

    Tracked currencies are always present (possibly empty) so breakdowns
    keep a stable shape.
    """
    buckets: Dict[str, BucketTotals] = field(default_factory=dict)
    buckets_by_currency: Dict[str, Dict[str, BucketTotals]] = field(default_factory=dict)

    @classmethod
    def empty(cls, currencies: Iterable[str]) -> "RevenueAggregation":
        return cls(buckets_by_currency={currency: {} for currency in currencies})

    def add(self, bucket: str, currency: str, revenue: float, order_count: int) -> None:
        self.buckets.setdefault(bucket, BucketTotals()).add(revenue, order_count)
        per_currency = self.buckets_by_currency.setdefault(currency, {})
        per_currency.setdefault(bucket, BucketTotals()).add(revenue, order_count)

    def currency_totals(self) -> Dict[str, CurrencyRevenue]:
        totals = {}
        for currency, buckets in self.buckets_by_currency.items():
            revenue = sum(b.revenue for b in buckets.values())
            orders = sum(b.order_count for b in buckets.values())
            totals[currency] = CurrencyRevenue(
                total_revenue=revenue,
                total_orders=orders,
                avg_order_value=revenue / orders if orders > 0 else 0,
            )
        return totals


def aggregate_revenue(
    orders: pl.DataFrame,
    granularity: Granularity,
    default_currency: str = "IDR",
    currencies: Iterable[str] = ("IDR", "AUD"),
) -> RevenueAggregation:
    """
    Bucket completed orders by date key and currency.

    Args:
        orders: Frame with created_at (local), total_amount, currency
        granularity: Bucket size
        default_currency: Used when an order's merchant has no currency
        currencies: Currencies always present in the result

    Returns:
        RevenueAggregation with combined and per-currency buckets
    """
    currency = pl.col("currency")
    grouped = (
        orders.with_columns(
            granularity.key_expr("created_at").alias("bucket"),
            pl.when(currency.is_null() | (currency == ""))
            .then(pl.lit(default_currency))
            .otherwise(currency.str.to_uppercase())
            .alias("currency"),
        )
        .group_by(["bucket", "currency"])
        .agg(
            pl.col("total_amount").sum().alias("revenue"),
            pl.len().alias("order_count"),
        )
        .sort(["bucket", "currency"])
    )

    aggregation = RevenueAggregation.empty(currencies)
    for row in grouped.iter_rows(named=True):
        aggregation.add(row["bucket"], row["currency"], row["revenue"], row["order_count"])
    return aggregation


def densify_revenue(
    buckets: Mapping[str, BucketTotals],
    start: datetime,
    end: datetime,
    granularity: Granularity,
) -> List[RevenuePoint]:
    """
    Emit one point per bucket between `start` and `end`, zero-filling gaps.

    The cursor is aligned to the granularity (Monday for weeks, the 1st for
    months) and the end bound is inclusive.
    """
    series = []
    for cursor in granularity.iter_range(start, end):
        key = granularity.bucket_key(cursor)
        totals = buckets.get(key)
        series.append(
            RevenuePoint(
                date=key,
                revenue=totals.revenue if totals else 0,
                order_count=totals.order_count if totals else 0,
            )
        )
    return series


# =============================================================================
# CUSTOMERS
# =============================================================================

def customer_growth(
    customers: pl.DataFrame,
    customers_before_start: int,
    start: datetime,
    end: datetime,
) -> List[CustomerGrowthPoint]:
    """
    Daily new customers with a cumulative total.

    Always bucketed by day whatever the chart granularity. The running total
    starts from the number of customers created before `start`.
    """
    new_by_day = bucket_counts(customers, Granularity.DAY)

    series = []
    running_total = customers_before_start
    for cursor in Granularity.DAY.iter_range(start, end):
        key = Granularity.DAY.bucket_key(cursor)
        new_customers = new_by_day.get(key, 0)
        running_total += new_customers
        series.append(
            CustomerGrowthPoint(
                date=key,
                new_customers=new_customers,
                total_customers=running_total,
            )
        )
    return series


# =============================================================================
# HEATMAP
# =============================================================================

def activity_heatmap(orders: pl.DataFrame, column: str = "created_at") -> List[HeatmapCell]:
    """
    Count orders per (day of week, hour) slot.

    Returns all 168 cells ordered by day (0 = Sunday) then hour.
    """
    counts = (
        orders.group_by(
            day_of_week_expr(column).alias("day_of_week"),
            pl.col(column).dt.hour().alias("hour"),
        )
        .agg(pl.len().alias("order_count"))
    )
    grid = {
        (row["day_of_week"], row["hour"]): row["order_count"]
        for row in counts.iter_rows(named=True)
    }

    return [
        HeatmapCell(day_of_week=day, hour=hour, order_count=grid.get((day, hour), 0))
        for day in range(DAYS_PER_WEEK)
        for hour in range(HOURS_PER_DAY)
    ]
