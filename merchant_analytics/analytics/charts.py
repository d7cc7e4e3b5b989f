"""
Super-admin Chart Service

Builds the dashboard chart payload for a period:

1. Resolve the period to a start time and bucket granularity
2. Aggregate completed-order revenue by bucket and currency, densify
3. Build daily customer growth seeded with the pre-range customer count
4. Build the 7 x 24 activity heatmap over a fixed trailing window
5. Compare the current and previous calendar months

Each step reads fresh rows through the injected ChartDataSource; any read
failure propagates and fails the whole build.
"""

from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

import structlog

from merchant_analytics.analytics.aggregators import (
    activity_heatmap,
    aggregate_revenue,
    customer_growth,
    densify_revenue,
    localize,
)
from merchant_analytics.analytics.bucketing import to_local, utc_now
from merchant_analytics.analytics.comparison import PeriodTotals, compare_months, month_windows
from merchant_analytics.analytics.datasource import ChartDataSource
from merchant_analytics.analytics.periods import ChartPeriod, resolve_period
from merchant_analytics.analytics.schemas import ChartData, ChartSummary, MonthOverMonth
from merchant_analytics.config.settings import AnalyticsSettings

logger = structlog.get_logger(__name__)


class ChartService:
    """
    Aggregates dashboard chart data.

    Example:
        service = ChartService(SqlAlchemyAnalyticsSource(db), settings.analytics)
        data = await service.build("90d")
    """

    def __init__(self, source: ChartDataSource, settings: AnalyticsSettings):
        self.source = source
        self.settings = settings
        self.zone = ZoneInfo(settings.timezone)

    async def build(self, period_token: Optional[str], now: Optional[datetime] = None) -> ChartData:
        now = now or utc_now()
        period = resolve_period(period_token)
        start = period.start_from(now)
        local_start = to_local(start, self.zone)
        local_now = to_local(now, self.zone)

        logger.debug(
            "Building chart data",
            period=period.token,
            granularity=period.granularity.value,
            start=str(start),
        )

        # Revenue
        orders = localize(await self.source.completed_orders_since(start), self.settings.timezone)
        revenue = aggregate_revenue(
            orders,
            period.granularity,
            default_currency=self.settings.default_currency,
            currencies=self.settings.tracked_currencies,
        )
        revenue_data = densify_revenue(revenue.buckets, local_start, local_now, period.granularity)
        revenue_data_by_currency = {
            currency: densify_revenue(buckets, local_start, local_now, period.granularity)
            for currency, buckets in revenue.buckets_by_currency.items()
        }

        # Customers
        customers = localize(await self.source.customers_since(start), self.settings.timezone)
        customers_before_start = await self.source.count_customers_before(start)
        growth = customer_growth(customers, customers_before_start, local_start, local_now)

        # Heatmap
        heatmap_start = now - timedelta(days=self.settings.heatmap_window_days)
        heatmap_orders = localize(await self.source.orders_since(heatmap_start), self.settings.timezone)
        heatmap = activity_heatmap(heatmap_orders)

        month_over_month = await self.month_over_month(now)

        total_revenue = sum(point.revenue for point in revenue_data)
        total_orders = sum(point.order_count for point in revenue_data)
        summary = ChartSummary(
            total_revenue=total_revenue,
            total_orders=total_orders,
            avg_order_value=total_revenue / total_orders if total_orders > 0 else 0,
            total_new_customers=sum(point.new_customers for point in growth),
            current_total_customers=growth[-1].total_customers if growth else customers_before_start,
        )

        logger.info(
            "Chart data built",
            period=period.token,
            orders=len(orders),
            points=len(revenue_data),
            total_revenue=total_revenue,
        )

        return ChartData(
            period=period.token,
            revenue_data=revenue_data,
            revenue_data_by_currency=revenue_data_by_currency,
            customer_growth=growth,
            activity_heatmap=heatmap,
            summary=summary,
            revenue_by_currency=revenue.currency_totals(),
            month_over_month=month_over_month,
        )

    async def month_over_month(self, now: datetime) -> MonthOverMonth:
        """Current month to date vs. the previous calendar month."""
        windows = month_windows(now, self.zone)

        current_revenue, current_orders = await self.source.completed_order_totals(windows.current_start, None)
        last_revenue, last_orders = await self.source.completed_order_totals(windows.last_start, windows.last_end)
        current_customers = await self.source.count_customers_between(windows.current_start, None)
        last_customers = await self.source.count_customers_between(windows.last_start, windows.last_end)

        return compare_months(
            PeriodTotals(current_revenue, current_orders, current_customers),
            PeriodTotals(last_revenue, last_orders, last_customers),
        )


def chart_cache_key(period: ChartPeriod) -> str:
    return f"charts:{period.token}"
