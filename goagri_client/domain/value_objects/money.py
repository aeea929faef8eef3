"""
Money helpers

Amounts are plain Decimals rounded to two places, half-up.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")


def to_amount(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Convert a wire or user value to a two-decimal amount"""
    if value is None or value == "":
        return ZERO
    if not isinstance(value, Decimal):
        try:
            # str() first so floats like 0.1 don't drag binary noise along
            value = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)
