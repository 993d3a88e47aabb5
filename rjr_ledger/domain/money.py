"""Decimal helpers for BRL amounts"""

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Anything closer than one cent is considered settled
TOLERANCE = Decimal("0.01")

# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value) -> Decimal:
    """Coerce int/float/str/Decimal to a 2-place Decimal (half-up)"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Not a monetary value: {value!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not a monetary value: {value!r}")
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # More digits than the context precision
        raise ValueError(f"Amount out of range: {value!r}") from e


def floor_to_cent(value: Decimal) -> Decimal:
    """Truncate towards zero at the cent"""
    return value.quantize(CENT, rounding=ROUND_DOWN)


def is_settled(total: Decimal, paid: Decimal) -> bool:
    """True when the remaining balance is below one cent"""
    return abs(total - paid) < TOLERANCE
