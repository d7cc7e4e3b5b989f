"""
Unit Tests - Date Bucketing
"""
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import polars as pl
import pytest

from merchant_analytics.analytics.bucketing import (
    Granularity,
    add_months,
    day_of_week,
    day_of_week_expr,
    localize_expr,
    to_local,
    to_utc,
)

JAKARTA = ZoneInfo("Asia/Jakarta")


class TestGranularity:
    """Tests for bucket keys, alignment and stepping"""

    @pytest.mark.parametrize("granularity,moment,expected", [
        (Granularity.DAY, datetime(2024, 5, 15, 14, 30), "2024-05-15"),
        (Granularity.WEEK, datetime(2024, 5, 15, 14, 30), "2024-05-13"),
        (Granularity.WEEK, datetime(2024, 5, 19, 23, 59), "2024-05-13"),
        (Granularity.WEEK, datetime(2024, 5, 20, 0, 0), "2024-05-20"),
        (Granularity.MONTH, datetime(2024, 5, 31, 23, 59), "2024-05"),
    ])
    def test_bucket_key(self, granularity, moment, expected):
        assert granularity.bucket_key(moment) == expected

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_key_expr_matches_bucket_key(self, granularity):
        moments = [
            datetime(2024, 1, 1, 0, 0),
            datetime(2024, 2, 29, 12, 0),
            datetime(2024, 5, 19, 23, 59, 59),
            datetime(2024, 12, 30, 8, 15),
        ]
        df = pl.DataFrame({"created_at": moments}, schema={"created_at": pl.Datetime("us")})

        keys = df.select(granularity.key_expr("created_at").alias("key"))["key"].to_list()

        assert keys == [granularity.bucket_key(m) for m in moments]

    def test_align_truncates_to_midnight(self):
        moment = datetime(2024, 5, 15, 14, 30, 12, 500)

        assert Granularity.DAY.align(moment) == datetime(2024, 5, 15)
        assert Granularity.WEEK.align(moment) == datetime(2024, 5, 13)
        assert Granularity.MONTH.align(moment) == datetime(2024, 5, 1)

    def test_iter_range_end_is_inclusive(self):
        end = datetime(2024, 5, 15, 14, 30)
        cursors = list(Granularity.DAY.iter_range(end - timedelta(days=7), end))

        assert len(cursors) == 8
        assert cursors[-1] == datetime(2024, 5, 15)

    def test_iter_range_end_earlier_in_day_than_start(self):
        # start 11:00 local, end 10:00 local a few days later
        cursors = list(Granularity.DAY.iter_range(datetime(2024, 4, 5, 11, 0), datetime(2024, 4, 8, 10, 0)))

        assert [Granularity.DAY.bucket_key(c) for c in cursors] == [
            "2024-04-05", "2024-04-06", "2024-04-07", "2024-04-08",
        ]

    def test_iter_range_months_from_month_end(self):
        cursors = list(Granularity.MONTH.iter_range(datetime(2024, 1, 31), datetime(2024, 4, 1)))

        assert [Granularity.MONTH.bucket_key(c) for c in cursors] == [
            "2024-01", "2024-02", "2024-03", "2024-04",
        ]


class TestAddMonths:

    @pytest.mark.parametrize("moment,months,expected", [
        (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
        (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
        (datetime(2024, 3, 31), -1, datetime(2024, 2, 29)),
        (datetime(2023, 12, 15), 1, datetime(2024, 1, 15)),
        (datetime(2024, 1, 10), -1, datetime(2023, 12, 10)),
        (datetime(2024, 5, 1, 9, 0), -12, datetime(2023, 5, 1, 9, 0)),
    ])
    def test_add_months(self, moment, months, expected):
        assert add_months(moment, months) == expected


class TestDayOfWeek:

    @pytest.mark.parametrize("moment,expected", [
        (datetime(2024, 5, 19), 0),  # Sunday
        (datetime(2024, 5, 20), 1),  # Monday
        (datetime(2024, 5, 25), 6),  # Saturday
    ])
    def test_sunday_is_zero(self, moment, expected):
        assert day_of_week(moment) == expected

    def test_expr_matches_python(self):
        moments = [datetime(2024, 5, 19) + timedelta(days=i) for i in range(7)]
        df = pl.DataFrame({"created_at": moments})

        days = df.select(day_of_week_expr("created_at").alias("d"))["d"].to_list()

        assert days == [0, 1, 2, 3, 4, 5, 6]


class TestTimeZones:

    def test_round_trip_through_local_time(self):
        utc_moment = datetime(2024, 5, 15, 20, 0)

        local = to_local(utc_moment, JAKARTA)

        assert local == datetime(2024, 5, 16, 3, 0)
        assert to_utc(local, JAKARTA) == utc_moment

    def test_localize_expr_matches_to_local(self):
        moments = [datetime(2024, 5, 15, 20, 0), datetime(2024, 1, 1, 0, 0)]
        df = pl.DataFrame({"created_at": moments}, schema={"created_at": pl.Datetime("us")})

        local = df.select(localize_expr("created_at", "Asia/Jakarta"))["created_at"].to_list()

        assert local == [to_local(m, JAKARTA) for m in moments]
