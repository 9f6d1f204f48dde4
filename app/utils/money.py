"""
Money rounding and output helpers.

Usage:
    from app.utils.money import round_money

    round_money(Decimal("25.985"))    -> Decimal("25.99")
    round_money(Decimal("10"))        -> Decimal("10.00")
    money_to_float(Decimal("311.88")) -> 311.88
"""
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(amount) -> Decimal:
    """
    Round to 2 decimal places, half away from zero.

    Only emitted aggregates go through here; intermediate sums stay exact.
    """
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_float(amount) -> float:
    """JSON number for a monetary value (API responses carry plain numbers)."""
    if amount is None:
        return 0.0
    return float(amount)
