"""
Subscription spend analytics - pure aggregation over a user's records.

Pure read-layer: no queries, no clock. The caller supplies the records, the
completed spend and the reference moment ``now``.

Blocks:
  1. overview           - counts, monthly/yearly totals (active only), total spent
  2. upcoming renewals  - active, next billing date within [now, now + 30 days]
  3. category breakdown - active only, monthly-equivalent per category

Monetary aggregates are rounded to cents only when the snapshot is emitted.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Sequence

from app.domain.billing import monthly_equivalent
from app.domain.subscription import SubscriptionStatus, DEFAULT_CATEGORY
from app.utils.money import money_to_float, round_money

UPCOMING_WINDOW_DAYS = 30


@dataclass(frozen=True)
class Overview:
    total_subscriptions: int
    active_subscriptions: int
    inactive_subscriptions: int
    monthly_total: Decimal
    yearly_total: Decimal
    total_spent: Decimal


@dataclass(frozen=True)
class UpcomingRenewal:
    id: Any
    service_name: str
    cost: Decimal
    next_billing_date: date


@dataclass(frozen=True)
class UpcomingRenewals:
    count: int
    total_cost: Decimal
    renewals: list[UpcomingRenewal] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    count: int
    monthly_total: Decimal


@dataclass(frozen=True)
class AnalyticsSnapshot:
    overview: Overview
    upcoming_renewals: UpcomingRenewals
    category_breakdown: list[CategoryTotal]

    def to_dict(self) -> dict:
        """Wire shape (camelCase keys, JSON numbers, ISO dates)."""
        o = self.overview
        u = self.upcoming_renewals
        return {
            "overview": {
                "totalSubscriptions": o.total_subscriptions,
                "activeSubscriptions": o.active_subscriptions,
                "inactiveSubscriptions": o.inactive_subscriptions,
                "monthlyTotal": money_to_float(o.monthly_total),
                "yearlyTotal": money_to_float(o.yearly_total),
                "totalSpent": money_to_float(o.total_spent),
            },
            "upcomingRenewals": {
                "count": u.count,
                "totalCost": money_to_float(u.total_cost),
                "renewals": [
                    {
                        "id": r.id,
                        "serviceName": r.service_name,
                        "cost": money_to_float(r.cost),
                        "nextBillingDate": r.next_billing_date.isoformat(),
                    }
                    for r in u.renewals
                ],
            },
            "categoryBreakdown": [
                {
                    "category": c.category,
                    "count": c.count,
                    "monthlyTotal": money_to_float(c.monthly_total),
                }
                for c in self.category_breakdown
            ],
        }


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def _is_active(sub) -> bool:
    return sub.status == SubscriptionStatus.ACTIVE.value


def renewal_window(now, days: int = UPCOMING_WINDOW_DAYS) -> tuple[date, date]:
    """Inclusive [start, end] date range of the upcoming-renewals block."""
    start = _as_date(now)
    return start, start + timedelta(days=days)


def _total_spent(completed) -> Decimal:
    if completed is None:
        return Decimal("0")
    if isinstance(completed, (Decimal, int, float, str)):
        return Decimal(str(completed))
    return sum((Decimal(str(amount)) for amount in completed), Decimal("0"))


def aggregate_subscription_analytics(
    subscriptions: Sequence,
    completed_spend: Decimal | Iterable | None,
    now,
    upcoming: Sequence | None = None,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> AnalyticsSnapshot:
    """
    Build the analytics snapshot of one user.

    Args:
        subscriptions: all of the user's subscriptions; each record exposes
            id, service_name, cost, billing_cycle, next_billing_date, status,
            category
        completed_spend: sum of completed transaction amounts, or the
            amounts themselves
        now: reference moment (date or datetime)
        upcoming: rows already selected by storage for the renewal window;
            when omitted the window is applied to ``subscriptions``
        window_days: length of the renewal window

    Returns:
        AnalyticsSnapshot
    """
    active = [s for s in subscriptions if _is_active(s)]

    monthly_total = sum((monthly_equivalent(s.cost, s.billing_cycle) for s in active), Decimal("0"))
    # Derived, never recomputed, so the two totals always agree
    yearly_total = monthly_total * 12

    overview = Overview(
        total_subscriptions=len(subscriptions),
        active_subscriptions=len(active),
        inactive_subscriptions=len(subscriptions) - len(active),
        monthly_total=round_money(monthly_total),
        yearly_total=round_money(yearly_total),
        total_spent=_total_spent(completed_spend),
    )

    if upcoming is None:
        start, end = renewal_window(now, window_days)
        upcoming = [
            s for s in active
            if start <= _as_date(s.next_billing_date) <= end
        ]
    due = sorted(upcoming, key=lambda s: _as_date(s.next_billing_date))
    upcoming_renewals = UpcomingRenewals(
        count=len(due),
        # Actual charge amounts, not monthly equivalents
        total_cost=round_money(sum((Decimal(str(s.cost)) for s in due), Decimal("0"))),
        renewals=[
            UpcomingRenewal(
                id=s.id,
                service_name=s.service_name,
                cost=Decimal(str(s.cost)),
                next_billing_date=_as_date(s.next_billing_date),
            )
            for s in due
        ],
    )

    # dict keeps first-seen order; sorted() is stable, so ties keep it too
    buckets: dict[str, list] = {}
    for s in active:
        category = s.category or DEFAULT_CATEGORY
        bucket = buckets.setdefault(category, [0, Decimal("0")])
        bucket[0] += 1
        bucket[1] += monthly_equivalent(s.cost, s.billing_cycle)

    breakdown = [
        CategoryTotal(category=category, count=count, monthly_total=round_money(total))
        for category, (count, total) in buckets.items()
    ]
    breakdown.sort(key=lambda c: c.monthly_total, reverse=True)

    return AnalyticsSnapshot(
        overview=overview,
        upcoming_renewals=upcoming_renewals,
        category_breakdown=breakdown,
    )
