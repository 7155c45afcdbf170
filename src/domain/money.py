"""Money arithmetic

All monetary values are Decimal quantized to two places with ROUND_HALF_UP.
The same helpers are used everywhere an amount or a rate is computed.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps float inputs from carrying binary noise into the result
    return Decimal(str(value))


def to_money(value: Number) -> Decimal:
    """Quantize a value to two decimal places (ROUND_HALF_UP)"""
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def calculate_amount(quantity: Number, rate: Number) -> Decimal:
    """amount = round(quantity * rate, 2)"""
    return to_money(to_decimal(quantity) * to_decimal(rate))


def derive_rate(amount: Number, quantity: Number) -> Decimal:
    """rate = round(amount / quantity, 2); quantity must be positive"""
    quantity = to_decimal(quantity)
    if quantity <= 0:
        raise ValueError("quantity must be greater than 0")
    return to_money(to_decimal(amount) / quantity)
