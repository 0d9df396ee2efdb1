"""Decimal helpers for financial calculations."""

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[str, int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without inheriting binary floating point noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    return Decimal(str(value))


def quantize_money(value: Number) -> Decimal:
    """Round to cents, half-even."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)
