"""Decimal helpers for monetary values"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Union

CENT = Decimal("0.01")

Numeric = Union[Decimal, int, float, str]


def to_decimal(value: Numeric) -> Decimal:
    """Convert input to Decimal without inheriting binary float noise (0.1 -> 0.1, not 0.1000000000000000055)"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half to even"""
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def format_money(value: Decimal) -> str:
    return f"${value:,.2f}"
