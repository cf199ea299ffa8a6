# shared/money.py
"""
Currency helpers.

Amounts are Decimals with two places. Whole-unit rounding follows the
point-of-sale convention the business has always used: halves round up
towards positive infinity (2.5 -> 3, -2.5 -> -2), and commission is
always rounded up.
"""
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP

ZERO = Decimal('0.00')
CENT = Decimal('0.01')
HALF = Decimal('0.5')


def to_decimal(value) -> Decimal:
    """Convert None/str/int/float/Decimal to Decimal; None and '' become zero."""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    """Quantize to cents."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value) -> Decimal:
    """Round to a whole currency unit, halves towards +infinity."""
    return (to_decimal(value) + HALF).to_integral_value(rounding=ROUND_FLOOR).quantize(CENT)


def ceil_whole(value) -> Decimal:
    """Round up to the next whole currency unit."""
    return to_decimal(value).to_integral_value(rounding=ROUND_CEILING).quantize(CENT)
