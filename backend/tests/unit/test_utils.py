"""Tests for date and money helpers."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from utils.dates import add_months, iter_days_back, month_end, month_start, to_utc_date
from utils.money import as_percent, to_cents, to_rate


class TestDates:
    def test_aware_datetime_converted_to_utc(self):
        buenos_aires = timezone(timedelta(hours=-3))
        assert to_utc_date(datetime(2023, 1, 31, 22, 0, tzinfo=buenos_aires)) == date(2023, 2, 1)

    def test_naive_datetime_taken_as_utc(self):
        assert to_utc_date(datetime(2023, 1, 31, 22, 0)) == date(2023, 1, 31)

    def test_month_bounds(self):
        assert month_start(date(2024, 2, 17)) == date(2024, 2, 1)
        assert month_end(date(2024, 2, 17)) == date(2024, 2, 29)

    def test_add_months_clamps(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
        assert add_months(date(2024, 3, 15), -3) == date(2023, 12, 15)

    def test_iter_days_back(self):
        assert list(iter_days_back(date(2024, 3, 2), 2)) == [
            date(2024, 3, 2),
            date(2024, 3, 1),
            date(2024, 2, 29),
        ]


class TestMoney:
    def test_to_cents_rounds_half_up(self):
        assert to_cents(Decimal("1.005")) == Decimal("1.01")
        assert to_cents(Decimal("-1.005")) == Decimal("-1.01")
        assert to_cents(None) is None

    def test_to_rate(self):
        assert to_rate(Decimal("0.12345675")) == Decimal("0.123457")

    def test_as_percent(self):
        assert as_percent(Decimal("1.035")) == Decimal("3.5")
        assert as_percent(None) is None
