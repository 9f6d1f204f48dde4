"""Tests for billing cycle arithmetic: monthly equivalents and date advance."""
from datetime import date
from decimal import Decimal

import pytest

from app.domain.billing import monthly_equivalent, advance_billing_date, add_months
from app.domain.subscription import BillingCycle


class TestMonthlyEquivalent:
    def test_daily_is_thirty_days(self):
        assert monthly_equivalent(Decimal("1.50"), "daily") == Decimal("45.00")

    def test_weekly_uses_4_33(self):
        assert monthly_equivalent(Decimal("10"), "weekly") == Decimal("43.30")

    @pytest.mark.parametrize("cost", ["0", "0.01", "15.99", "999999.99"])
    def test_monthly_is_identity(self, cost):
        assert monthly_equivalent(Decimal(cost), "monthly") == Decimal(cost)

    def test_quarterly_divides_by_three(self):
        assert monthly_equivalent(Decimal("30"), "quarterly") == Decimal("10")

    def test_yearly_divides_by_twelve(self):
        assert monthly_equivalent(Decimal("120.00"), "yearly") == Decimal("10")

    def test_accepts_enum_member(self):
        assert monthly_equivalent(Decimal("120"), BillingCycle.YEARLY) == Decimal("10")

    def test_accepts_float_cost(self):
        assert monthly_equivalent(15.99, "monthly") == Decimal("15.99")

    def test_unknown_cycle_contributes_zero(self):
        assert monthly_equivalent(Decimal("50"), "fortnightly") == Decimal("0")

    def test_missing_cycle_contributes_zero(self):
        assert monthly_equivalent(Decimal("50"), None) == Decimal("0")

    def test_yearly_costs_sum_back_exactly(self):
        costs = [Decimal("119.88"), Decimal("69.99"), Decimal("10.01")]
        monthly = sum(monthly_equivalent(c, "yearly") for c in costs)
        assert (monthly * 12).quantize(Decimal("0.01")) == sum(costs)


class TestAdvanceBillingDate:
    def test_daily(self):
        assert advance_billing_date(date(2025, 12, 31), "daily") == date(2026, 1, 1)

    def test_weekly(self):
        assert advance_billing_date(date(2025, 2, 25), "weekly") == date(2025, 3, 4)

    def test_monthly(self):
        assert advance_billing_date(date(2025, 6, 15), "monthly") == date(2025, 7, 15)

    def test_monthly_day_overflow_clips_to_month_end(self):
        # Jan 31 + 1 month has no Feb 31: clip to Feb 28
        assert advance_billing_date(date(2025, 1, 31), "monthly") == date(2025, 2, 28)

    def test_monthly_day_overflow_leap_year(self):
        assert advance_billing_date(date(2024, 1, 31), "monthly") == date(2024, 2, 29)

    def test_monthly_crosses_year(self):
        assert advance_billing_date(date(2025, 12, 10), "monthly") == date(2026, 1, 10)

    def test_quarterly(self):
        assert advance_billing_date(date(2025, 11, 30), "quarterly") == date(2026, 2, 28)

    def test_yearly(self):
        assert advance_billing_date(date(2025, 6, 1), "yearly") == date(2026, 6, 1)

    def test_yearly_from_leap_day(self):
        assert advance_billing_date(date(2024, 2, 29), "yearly") == date(2025, 2, 28)

    def test_unknown_cycle_raises(self):
        with pytest.raises(ValueError, match="Invalid billing cycle"):
            advance_billing_date(date(2025, 1, 1), "hourly")


class TestAddMonths:
    def test_negative_shift(self):
        assert add_months(date(2025, 3, 31), -1) == date(2025, 2, 28)

    def test_twelve_months(self):
        assert add_months(date(2025, 5, 5), 12) == date(2026, 5, 5)
