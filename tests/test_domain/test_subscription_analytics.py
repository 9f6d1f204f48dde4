"""Tests for subscription spend analytics aggregation."""
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from app.domain.subscription_analytics import aggregate_subscription_analytics, renewal_window

NOW = datetime(2025, 6, 1, 9, 30, tzinfo=timezone.utc)

_next_id = iter(range(1, 1000))


def sub(**kw):
    base = dict(
        id=next(_next_id),
        service_name="Service",
        cost=Decimal("10.00"),
        billing_cycle="monthly",
        next_billing_date=date(2025, 9, 1),
        status="active",
        category="entertainment",
    )
    base.update(kw)
    if not isinstance(base["cost"], Decimal):
        base["cost"] = Decimal(str(base["cost"]))
    return SimpleNamespace(**base)


class TestOverview:
    def test_monthly_and_yearly_totals(self):
        subs = [
            sub(cost="15.99", billing_cycle="monthly"),
            sub(cost="120.00", billing_cycle="yearly"),
        ]
        o = aggregate_subscription_analytics(subs, Decimal("0"), NOW).overview
        assert o.monthly_total == Decimal("25.99")
        assert o.yearly_total == Decimal("311.88")

    def test_yearly_is_twelve_times_unrounded_monthly(self):
        # 10/3 + 10/3 = 6.666..., * 12 = 80.00 (not 6.67 * 12 = 80.04)
        subs = [sub(cost="10", billing_cycle="quarterly"), sub(cost="10", billing_cycle="quarterly")]
        o = aggregate_subscription_analytics(subs, None, NOW).overview
        assert o.monthly_total == Decimal("6.67")
        assert o.yearly_total == Decimal("80.00")

    def test_non_active_statuses_excluded_from_totals(self):
        subs = [
            sub(cost="10", status="active"),
            sub(cost="100", status="inactive"),
            sub(cost="100", status="cancelled"),
            sub(cost="100", status="expired"),
        ]
        o = aggregate_subscription_analytics(subs, Decimal("0"), NOW).overview
        assert o.total_subscriptions == 4
        assert o.active_subscriptions == 1
        assert o.inactive_subscriptions == 3
        assert o.monthly_total == Decimal("10.00")

    def test_total_spent_from_sum(self):
        o = aggregate_subscription_analytics([], Decimal("47.97"), NOW).overview
        assert o.total_spent == Decimal("47.97")

    def test_total_spent_from_amounts(self):
        o = aggregate_subscription_analytics([], [Decimal("15.99"), Decimal("9.99")], NOW).overview
        assert o.total_spent == Decimal("25.98")

    def test_no_completed_transactions(self):
        o = aggregate_subscription_analytics([], None, NOW).overview
        assert o.total_spent == Decimal("0")

    def test_empty_user(self):
        snapshot = aggregate_subscription_analytics([], None, NOW)
        assert snapshot.overview.total_subscriptions == 0
        assert snapshot.overview.monthly_total == Decimal("0.00")
        assert snapshot.upcoming_renewals.count == 0
        assert snapshot.category_breakdown == []

    def test_unknown_cycle_contributes_zero(self):
        subs = [sub(cost="10", billing_cycle="monthly"), sub(cost="99", billing_cycle="biweekly")]
        o = aggregate_subscription_analytics(subs, None, NOW).overview
        assert o.active_subscriptions == 2
        assert o.monthly_total == Decimal("10.00")


class TestUpcomingRenewals:
    def test_window_is_inclusive(self):
        subs = [
            sub(service_name="today", next_billing_date=date(2025, 6, 1)),
            sub(service_name="edge", next_billing_date=date(2025, 7, 1)),
            sub(service_name="outside", next_billing_date=date(2025, 7, 2)),
            sub(service_name="past", next_billing_date=date(2025, 5, 31)),
        ]
        upcoming = aggregate_subscription_analytics(subs, None, NOW).upcoming_renewals
        assert [r.service_name for r in upcoming.renewals] == ["today", "edge"]
        assert upcoming.count == 2

    def test_sorted_by_date_and_totals_actual_cost(self):
        subs = [
            sub(service_name="B", cost="120", billing_cycle="yearly", next_billing_date=date(2025, 6, 20)),
            sub(service_name="A", cost="9.99", next_billing_date=date(2025, 6, 5)),
        ]
        upcoming = aggregate_subscription_analytics(subs, None, NOW).upcoming_renewals
        assert [r.service_name for r in upcoming.renewals] == ["A", "B"]
        assert upcoming.total_cost == Decimal("129.99")

    def test_inactive_not_upcoming(self):
        subs = [sub(status="cancelled", next_billing_date=date(2025, 6, 3))]
        assert aggregate_subscription_analytics(subs, None, NOW).upcoming_renewals.count == 0

    def test_preselected_rows_are_used(self):
        chosen = sub(service_name="chosen", next_billing_date=date(2025, 6, 10))
        subs = [chosen, sub(service_name="ignored", next_billing_date=date(2025, 6, 11))]
        upcoming = aggregate_subscription_analytics(subs, None, NOW, upcoming=[chosen]).upcoming_renewals
        assert [r.service_name for r in upcoming.renewals] == ["chosen"]

    def test_renewal_window_bounds(self):
        assert renewal_window(NOW) == (date(2025, 6, 1), date(2025, 7, 1))
        assert renewal_window(date(2025, 6, 1), days=7) == (date(2025, 6, 1), date(2025, 6, 8))


class TestCategoryBreakdown:
    def test_sorted_by_monthly_total_descending(self):
        subs = [
            sub(category="music", cost="9.99"),
            sub(category="productivity", cost="59.99"),
            sub(category="productivity", cost="120", billing_cycle="yearly"),
        ]
        breakdown = aggregate_subscription_analytics(subs, None, NOW).category_breakdown
        assert [(c.category, c.count, c.monthly_total) for c in breakdown] == [
            ("productivity", 2, Decimal("69.99")),
            ("music", 1, Decimal("9.99")),
        ]

    def test_ties_keep_first_seen_order(self):
        subs = [
            sub(category="news", cost="5"),
            sub(category="cloud", cost="5"),
            sub(category="fitness", cost="5"),
        ]
        breakdown = aggregate_subscription_analytics(subs, None, NOW).category_breakdown
        assert [c.category for c in breakdown] == ["news", "cloud", "fitness"]

    def test_missing_category_goes_to_other(self):
        subs = [sub(category=None, cost="3"), sub(category="", cost="4")]
        breakdown = aggregate_subscription_analytics(subs, None, NOW).category_breakdown
        assert len(breakdown) == 1
        assert breakdown[0].category == "other"
        assert breakdown[0].count == 2

    def test_inactive_excluded(self):
        subs = [sub(category="music", status="inactive")]
        assert aggregate_subscription_analytics(subs, None, NOW).category_breakdown == []

    def test_category_totals_sum_to_monthly_total(self):
        subs = [
            sub(category="a", cost="10", billing_cycle="quarterly"),
            sub(category="b", cost="7", billing_cycle="weekly"),
            sub(category="c", cost="1.5", billing_cycle="daily"),
        ]
        snapshot = aggregate_subscription_analytics(subs, None, NOW)
        total = sum(c.monthly_total for c in snapshot.category_breakdown)
        assert abs(total - snapshot.overview.monthly_total) <= Decimal("0.01") * len(subs)


class TestWireShape:
    def test_to_dict(self):
        subs = [sub(id=3, service_name="Netflix", cost="15.99", next_billing_date=date(2025, 6, 15))]
        data = aggregate_subscription_analytics(subs, Decimal("31.98"), NOW).to_dict()
        assert data["overview"] == {
            "totalSubscriptions": 1,
            "activeSubscriptions": 1,
            "inactiveSubscriptions": 0,
            "monthlyTotal": 15.99,
            "yearlyTotal": 191.88,
            "totalSpent": 31.98,
        }
        assert data["upcomingRenewals"]["renewals"] == [
            {"id": 3, "serviceName": "Netflix", "cost": 15.99, "nextBillingDate": "2025-06-15"}
        ]
        assert data["categoryBreakdown"] == [
            {"category": "entertainment", "count": 1, "monthlyTotal": 15.99}
        ]
