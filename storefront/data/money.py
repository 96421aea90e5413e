"""
Money Helpers

Amounts are stored as integer cents and converted to decimal values only at
output boundaries.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Amount = Union[int, float, Decimal, str]

CENT = Decimal("0.01")


def to_cents(amount: Amount) -> int:
    """Round an amount half-up to the cent and return it as integer cents"""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return int(value.quantize(CENT, rounding=ROUND_HALF_UP) * 100)


def from_cents(cents: int) -> float:
    """Convert integer cents to a float amount exact to the cent"""
    return float(Decimal(cents) / 100)


def average_amount(total_cents: int, count: int) -> float:
    """Average of a cents total over ``count`` items, 0.0 when there are none"""
    if count <= 0:
        return 0.0
    return float((Decimal(total_cents) / count / 100).quantize(CENT, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float) -> float:
    """Share of ``part`` in ``whole`` as a percentage rounded to 2 places"""
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def percentage_change(current: float, previous: float) -> float:
    """Relative change from ``previous`` to ``current``; 0.0 without a baseline"""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 2)
