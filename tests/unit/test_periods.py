"""
Unit Tests - Period Resolution
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from merchant_analytics.analytics.bucketing import Granularity
from merchant_analytics.analytics.periods import resolve_period, resolve_sales_range
from merchant_analytics.exceptions import InvalidDateRangeError

UTC = timezone.utc
JAKARTA = ZoneInfo("Asia/Jakarta")


class TestResolvePeriod:

    @pytest.mark.parametrize("token,days,granularity", [
        ("7d", 7, Granularity.DAY),
        ("30d", 30, Granularity.DAY),
        ("90d", 90, Granularity.WEEK),
        ("1y", 365, Granularity.MONTH),
    ])
    def test_known_tokens(self, token, days, granularity):
        period = resolve_period(token)

        assert period.token == token
        assert period.days == days
        assert period.granularity is granularity

    @pytest.mark.parametrize("token", [None, "", "2w", "7D", "all"])
    def test_unknown_tokens_fall_back_to_30d(self, token):
        assert resolve_period(token).token == "30d"

    def test_start_from(self, now):
        assert resolve_period("7d").start_from(now) == now - timedelta(days=7)


class TestResolveSalesRange:

    def test_default_is_month_to_date(self, now):
        sales_range = resolve_sales_range(None, now, UTC)

        assert sales_range.period == "month"
        assert sales_range.start == datetime(2024, 5, 1)
        assert sales_range.end == now

    @pytest.mark.parametrize("period,expected_start", [
        ("today", datetime(2024, 5, 15)),
        ("week", datetime(2024, 5, 8, 14, 30)),
        ("month", datetime(2024, 5, 1)),
        ("quarter", datetime(2024, 2, 15, 14, 30)),
        ("year", datetime(2024, 1, 1)),
        ("decade", datetime(2024, 5, 1)),
    ])
    def test_named_periods(self, now, period, expected_start):
        assert resolve_sales_range(period, now, UTC).start == expected_start

    def test_today_uses_reporting_zone_midnight(self, now):
        # 14:30 UTC is 21:30 in Jakarta; local midnight is 17:00 UTC the day before
        sales_range = resolve_sales_range("today", now, JAKARTA)

        assert sales_range.start == datetime(2024, 5, 14, 17, 0)

    def test_custom_dates_cover_whole_days(self, now):
        sales_range = resolve_sales_range("custom", now, UTC, "2024-05-01", "2024-05-10")

        assert sales_range.period == "custom"
        assert sales_range.start == datetime(2024, 5, 1)
        assert sales_range.end == datetime(2024, 5, 10, 23, 59, 59, 999999)

    def test_custom_single_day(self, now):
        sales_range = resolve_sales_range("custom", now, UTC, "2024-05-10", "2024-05-10")

        assert sales_range.start < sales_range.end

    def test_custom_dates_in_reporting_zone(self, now):
        sales_range = resolve_sales_range("custom", now, JAKARTA, "2024-05-01", "2024-05-01")

        assert sales_range.start == datetime(2024, 4, 30, 17, 0)

    def test_custom_datetime_with_offset(self, now):
        sales_range = resolve_sales_range(
            "custom", now, JAKARTA, "2024-05-01T10:00:00Z", "2024-05-02T10:00:00+07:00"
        )

        assert sales_range.start == datetime(2024, 5, 1, 10, 0)
        assert sales_range.end == datetime(2024, 5, 2, 3, 0)

    @pytest.mark.parametrize("start,end", [
        (None, "2024-05-10"),
        ("2024-05-01", None),
        (None, None),
    ])
    def test_custom_requires_both_dates(self, now, start, end):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            resolve_sales_range("custom", now, UTC, start, end)

        assert exc_info.value.error_code == "VALIDATION_ERROR"
        assert exc_info.value.status_code == 400

    def test_custom_rejects_reversed_range(self, now):
        with pytest.raises(InvalidDateRangeError):
            resolve_sales_range("custom", now, UTC, "2024-05-10", "2024-05-01")

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-01", "15/05/2024"])
    def test_custom_rejects_unparsable_dates(self, now, value):
        with pytest.raises(InvalidDateRangeError):
            resolve_sales_range("custom", now, UTC, value, "2024-05-10")
