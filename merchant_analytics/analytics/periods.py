"""
Period resolution for analytics endpoints.

Chart periods (super-admin dashboard):
    7d  -> last 7 days,   bucketed by day
    30d -> last 30 days,  bucketed by day (default)
    90d -> last 90 days,  bucketed by week
    1y  -> last 365 days, bucketed by month

Unknown tokens fall back to 30d without raising.

Sales periods (merchant reports): today, week, month (default), quarter,
year, custom. Custom ranges are validated and raise InvalidDateRangeError.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Dict, Optional

from merchant_analytics.analytics.bucketing import UTC, Granularity, to_local, to_utc
from merchant_analytics.exceptions import InvalidDateRangeError


@dataclass(frozen=True)
class ChartPeriod:
    """A dashboard period token and how it is bucketed"""
    token: str
    days: int
    granularity: Granularity

    def start_from(self, now: datetime) -> datetime:
        return now - timedelta(days=self.days)


PERIODS: Dict[str, ChartPeriod] = {
    "7d": ChartPeriod("7d", 7, Granularity.DAY),
    "30d": ChartPeriod("30d", 30, Granularity.DAY),
    "90d": ChartPeriod("90d", 90, Granularity.WEEK),
    "1y": ChartPeriod("1y", 365, Granularity.MONTH),
}
DEFAULT_PERIOD = "30d"


def resolve_period(token: Optional[str]) -> ChartPeriod:
    """Map a period token to its definition, defaulting to 30d."""
    return PERIODS.get(token or DEFAULT_PERIOD, PERIODS[DEFAULT_PERIOD])


# =============================================================================
# MERCHANT SALES RANGES
# =============================================================================

SALES_PERIODS = ("today", "week", "month", "quarter", "year", "custom")
DEFAULT_SALES_PERIOD = "month"


@dataclass(frozen=True)
class SalesRange:
    """Resolved merchant report range, bounds in naive UTC (inclusive)"""
    period: str
    start: datetime
    end: datetime


def _parse_bound(value: str, zone: tzinfo, *, end_of_day: bool) -> datetime:
    """
    Parse an ISO date or datetime.

    Bare dates cover the whole local day. Naive datetimes are local time;
    offset-aware ones are converted.
    """
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            moment = datetime.combine(day, time.max if end_of_day else time.min)
            return to_utc(moment, zone)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidDateRangeError(f"Invalid date: {value}")

    if parsed.tzinfo is not None:
        return parsed.astimezone(UTC).replace(tzinfo=None)
    return to_utc(parsed, zone)


def resolve_sales_range(
    period: Optional[str],
    now: datetime,
    zone: tzinfo,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> SalesRange:
    """
    Resolve a merchant report period to UTC bounds.

    Args:
        period: One of SALES_PERIODS; anything else means "month"
        now: Current time, naive UTC
        zone: Reporting time zone for calendar boundaries
        start_date: ISO start, required for "custom"
        end_date: ISO end, required for "custom"

    Raises:
        InvalidDateRangeError: custom range missing, unparsable or reversed
    """
    period = period if period in SALES_PERIODS else DEFAULT_SALES_PERIOD
    local_now = to_local(now, zone)
    local_midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "custom":
        if not start_date or not end_date:
            raise InvalidDateRangeError("Start and end dates required for custom period")
        start = _parse_bound(start_date, zone, end_of_day=False)
        end = _parse_bound(end_date, zone, end_of_day=True)
        if start > end:
            raise InvalidDateRangeError("Start date must not be after end date")
        return SalesRange(period, start, end)

    if period == "today":
        start = to_utc(local_midnight, zone)
    elif period == "week":
        start = now - timedelta(days=7)
    elif period == "quarter":
        start = now - timedelta(days=90)
    elif period == "year":
        start = to_utc(local_midnight.replace(month=1, day=1), zone)
    else:
        start = to_utc(local_midnight.replace(day=1), zone)

    return SalesRange(period, start, now)
