"""Realized profit and loss."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ....shared.utils.money import quantize_money, to_decimal
from .value_objects import TradeDirection, TradeStatus


@dataclass(frozen=True)
class ProfitLoss:
    amount: Decimal
    percent: Decimal


def calculate_profit_loss(
    direction: TradeDirection,
    entry_price: Decimal,
    exit_price: Decimal,
    quantity: Decimal,
    fees: Decimal = Decimal("0"),
) -> ProfitLoss:
    """The one formula for a trade's realized result.

    price_diff is exit - entry for longs and entry - exit for shorts.
    amount = price_diff * quantity - fees; percent = price_diff / entry * 100.
    Both are rounded half-even to cents.
    """
    entry_price = to_decimal(entry_price)
    exit_price = to_decimal(exit_price)

    if direction == TradeDirection.LONG:
        price_diff = exit_price - entry_price
    else:
        price_diff = entry_price - exit_price

    amount = price_diff * to_decimal(quantity) - to_decimal(fees)
    percent = price_diff / entry_price * 100

    return ProfitLoss(amount=quantize_money(amount), percent=quantize_money(percent))


def realized_profit_loss(
    status: TradeStatus,
    direction: TradeDirection,
    entry_price: Decimal,
    exit_price: Optional[Decimal],
    quantity: Decimal,
    fees: Decimal,
) -> Optional[ProfitLoss]:
    """P&L when the trade is closed with an exit price, otherwise None."""
    if status != TradeStatus.CLOSED or exit_price is None:
        return None
    return calculate_profit_loss(direction, entry_price, exit_price, quantity, fees)
