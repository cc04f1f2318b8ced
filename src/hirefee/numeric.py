"""Numeric coercion for job-record and form input.

Commission fields reach the engine as ints, floats, numeric strings from
form inputs, or not at all on older records. Everything passes through
to_decimal so the engine never sees None, NaN, infinity or a bool.

All monetary values use Decimal for exact arithmetic. No floats in finance.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
# Largest decimal exponent accepted from input; beyond it values read as 0
MAX_EXPONENT = 15


def to_decimal(value: Any) -> Decimal:
    """Coerce any input to a finite Decimal, defaulting to zero.

    Accepts Decimal, int, float and numeric strings (thousands
    separators and surrounding whitespace are tolerated). None, bools,
    NaN, infinities, unparsable strings and other types become 0, as do
    magnitudes above 1e15 or below 1e-15 that would overflow or underflow
    later arithmetic.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the short repr, so 0.1 becomes Decimal("0.1")
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not result.is_finite():
        return ZERO
    if abs(result.adjusted()) > MAX_EXPONENT:
        return ZERO
    return result


def non_negative(value: Any) -> Decimal:
    """Coerce to Decimal and floor at zero."""
    return max(ZERO, to_decimal(value))


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Clamp value into [low, high]. If low > high, high wins."""
    return min(high, max(low, value))


def percent_of(base: Decimal, percentage: Decimal) -> Decimal:
    return base * percentage / HUNDRED


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents (half-up).

    Values too large to carry cents at the context precision are
    returned unrounded.
    """
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return value
