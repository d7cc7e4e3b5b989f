"""
Date Bucketing

One bucketing strategy, parameterized by granularity, shared by every chart
aggregator. A granularity knows how to:

- derive the bucket key of a timestamp (Python and polars expression forms,
  which must agree),
- align a range start to the first bucket boundary,
- step a cursor to the next bucket.

Keys:
    day   -> "YYYY-MM-DD"
    week  -> "YYYY-MM-DD" of the Monday starting the ISO week
    month -> "YYYY-MM"

All timestamps handled here are naive. Stored timestamps are naive UTC and
are converted to naive reporting-zone local time before bucketing.
"""

import calendar
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Iterator

import polars as pl

UTC = timezone.utc


class Granularity(str, Enum):
    """Chart bucket size"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    def bucket_key(self, moment: datetime) -> str:
        """Key of the bucket containing `moment`."""
        if self is Granularity.MONTH:
            return moment.strftime("%Y-%m")
        if self is Granularity.WEEK:
            moment = moment - timedelta(days=moment.weekday())
        return moment.strftime("%Y-%m-%d")

    def key_expr(self, column: str) -> pl.Expr:
        """Polars expression computing `bucket_key` for a datetime column."""
        expr = pl.col(column)
        if self is Granularity.MONTH:
            return expr.dt.strftime("%Y-%m")
        if self is Granularity.WEEK:
            # polars weeks start on Monday
            expr = expr.dt.truncate("1w")
        return expr.dt.strftime("%Y-%m-%d")

    def align(self, moment: datetime) -> datetime:
        """Move `moment` back to midnight of its bucket's first day."""
        midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        if self is Granularity.WEEK:
            return midnight - timedelta(days=midnight.weekday())
        if self is Granularity.MONTH:
            return midnight.replace(day=1)
        return midnight

    def step(self, moment: datetime) -> datetime:
        """Advance `moment` by one bucket."""
        if self is Granularity.DAY:
            return moment + timedelta(days=1)
        if self is Granularity.WEEK:
            return moment + timedelta(days=7)
        return add_months(moment, 1)

    def iter_range(self, start: datetime, end: datetime) -> Iterator[datetime]:
        """
        Yield one cursor per bucket from the bucket of `start` through the
        bucket of `end`, both inclusive.

        Cursors sit at bucket boundaries, so the time of day of either bound
        never drops a bucket (local offsets differ across a DST change).
        """
        cursor = self.align(start)
        last = self.align(end)
        while cursor <= last:
            yield cursor
            cursor = self.step(cursor)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def day_of_week(moment: datetime) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return moment.isoweekday() % 7


def day_of_week_expr(column: str) -> pl.Expr:
    """Polars form of `day_of_week` (polars weekday is 1 = Monday ... 7 = Sunday)."""
    return pl.col(column).dt.weekday() % 7


# =============================================================================
# TIME ZONES
# =============================================================================

def utc_now() -> datetime:
    """Current time as naive UTC, matching stored timestamps."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_local(moment: datetime, zone: tzinfo) -> datetime:
    """Naive UTC -> naive local time in `zone`."""
    return moment.replace(tzinfo=UTC).astimezone(zone).replace(tzinfo=None)


def to_utc(moment: datetime, zone: tzinfo) -> datetime:
    """Naive local time in `zone` -> naive UTC."""
    return moment.replace(tzinfo=zone).astimezone(UTC).replace(tzinfo=None)


def localize_expr(column: str, zone_name: str) -> pl.Expr:
    """Polars form of `to_local` for a naive UTC datetime column."""
    return (
        pl.col(column)
        .dt.replace_time_zone("UTC")
        .dt.convert_time_zone(zone_name)
        .dt.replace_time_zone(None)
    )
