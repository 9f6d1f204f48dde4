"""
Billing cycle arithmetic: monthly-equivalent normalization and next billing
date advancement.

Pure functions, no I/O. Costs are Decimal; rounding is left to the caller so
sums never accumulate rounding error.
"""
import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal

from app.domain.subscription import BillingCycle, parse_enum

logger = logging.getLogger(__name__)

WEEKS_PER_MONTH = Decimal("4.33")
DAYS_PER_MONTH = 30

_ZERO = Decimal("0")


def monthly_equivalent(cost, cycle) -> Decimal:
    """
    Normalize a charge to its per-month figure.

        daily     -> cost * 30
        weekly    -> cost * 4.33
        monthly   -> cost
        quarterly -> cost / 3
        yearly    -> cost / 12

    An unrecognized cycle contributes 0: one bad record must not blank out a
    whole aggregate. Input validation rejects such cycles before they are
    stored, so reaching this branch means the row bypassed validation.
    """
    cost = Decimal(str(cost))
    billing_cycle = parse_enum(BillingCycle, cycle)

    if billing_cycle is BillingCycle.DAILY:
        return cost * DAYS_PER_MONTH
    if billing_cycle is BillingCycle.WEEKLY:
        return cost * WEEKS_PER_MONTH
    if billing_cycle is BillingCycle.MONTHLY:
        return cost
    if billing_cycle is BillingCycle.QUARTERLY:
        return cost / 3
    if billing_cycle is BillingCycle.YEARLY:
        return cost / 12

    logger.warning("Unknown billing cycle %r, contributing 0 to monthly total", cycle)
    return _ZERO


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    """Calendar-month shift; the day is clipped to the target month's length."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, last_day_of_month(year, month))
    return date(year, month, day)


def advance_billing_date(d: date, cycle) -> date:
    """
    Next billing date after ``d`` for the given cycle.

    Month-based cycles clip day-of-month overflow to the last day of the
    target month: 2025-01-31 + 1 month -> 2025-02-28, 2024-01-31 + 1 month ->
    2024-02-29, 2024-02-29 + 1 year -> 2025-02-28.

    Raises:
        ValueError: on an unrecognized cycle
    """
    billing_cycle = parse_enum(BillingCycle, cycle)

    if billing_cycle is BillingCycle.DAILY:
        return d + timedelta(days=1)
    if billing_cycle is BillingCycle.WEEKLY:
        return d + timedelta(days=7)
    if billing_cycle is BillingCycle.MONTHLY:
        return add_months(d, 1)
    if billing_cycle is BillingCycle.QUARTERLY:
        return add_months(d, 3)
    if billing_cycle is BillingCycle.YEARLY:
        return add_months(d, 12)

    raise ValueError(f"Invalid billing cycle: {cycle}")
