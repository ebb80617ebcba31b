"""Rounding policy for persisted amounts.

Calculations keep full ``Decimal`` precision; values are rounded only at the
point where a derived row is written.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")


def to_cents(value: Decimal | None) -> Decimal | None:
    """Round a money amount to the nearest cent (half up)."""
    if value is None:
        return None
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_rate(value: Decimal | None) -> Decimal | None:
    """Round a rate or percentage to six decimal places."""
    if value is None:
        return None
    return value.quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def as_percent(factor: Decimal | None) -> Decimal | None:
    """Convert a growth factor (1.035) to a percentage change (3.5)."""
    if factor is None:
        return None
    return (factor - 1) * 100
