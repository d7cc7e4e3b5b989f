"""
Month-over-month comparison.

Compares the current calendar month (to date) with the previous full
calendar month. Growth is a percentage rounded half-up to one decimal:

    last == 0 and current > 0  -> 100
    last == 0 otherwise        -> 0
    else                       -> (current - last) / last * 100
"""

import math
from dataclasses import dataclass
from datetime import datetime, tzinfo

from merchant_analytics.analytics.bucketing import add_months, to_local, to_utc
from merchant_analytics.analytics.schemas import MonthOverMonth


@dataclass(frozen=True)
class MonthWindows:
    """Calendar month boundaries in naive UTC; ranges are [start, end)"""
    current_start: datetime
    last_start: datetime

    @property
    def last_end(self) -> datetime:
        return self.current_start


@dataclass(frozen=True)
class PeriodTotals:
    revenue: float = 0.0
    orders: int = 0
    customers: int = 0


def month_windows(now: datetime, zone: tzinfo) -> MonthWindows:
    """Start of the current and previous calendar month in the reporting zone."""
    local_month_start = to_local(now, zone).replace(
        day=1, hour=0, minute=0, second=0, microsecond=0
    )
    return MonthWindows(
        current_start=to_utc(local_month_start, zone),
        last_start=to_utc(add_months(local_month_start, -1), zone),
    )


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def growth_percentage(current: float, last: float) -> float:
    """Percentage change from `last` to `current`, never dividing by zero."""
    if last == 0:
        return 100.0 if current > 0 else 0.0
    return round_half_up((current - last) / last * 100)


def compare_months(current: PeriodTotals, last: PeriodTotals) -> MonthOverMonth:
    return MonthOverMonth(
        current_month_revenue=current.revenue,
        last_month_revenue=last.revenue,
        revenue_growth=growth_percentage(current.revenue, last.revenue),
        current_month_orders=current.orders,
        last_month_orders=last.orders,
        order_growth=growth_percentage(current.orders, last.orders),
        current_month_customers=current.customers,
        last_month_customers=last.customers,
        customer_growth=growth_percentage(current.customers, last.customers),
    )
