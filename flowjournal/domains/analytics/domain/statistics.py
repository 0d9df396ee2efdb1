"""
Trade performance statistics.

Pure aggregation over (status, profit_loss) outcomes:
- counts by status and by sign of profit_loss
- win rate against closed trades only
- money totals in Decimal, rounded half-even to cents
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ....shared.utils.money import ZERO, quantize_money
from ...trading.domain.value_objects import TradeStatus


@dataclass(frozen=True)
class TradeOutcome:
    status: TradeStatus
    profit_loss: Optional[Decimal] = None


@dataclass(frozen=True)
class TradeStatistics:
    total_trades: int = 0
    closed_trades: int = 0
    open_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: Decimal = ZERO
    total_profit_loss: Decimal = ZERO
    avg_win: Decimal = ZERO
    avg_loss: Decimal = ZERO
    best_trade: Decimal = ZERO
    worst_trade: Decimal = ZERO


class StatsAggregator:
    """Rolls trade outcomes up into TradeStatistics."""

    @staticmethod
    def aggregate(outcomes: Iterable[TradeOutcome]) -> TradeStatistics:
        total = closed = open_ = 0
        wins = []
        losses = []
        realized = []

        for outcome in outcomes:
            total += 1
            if outcome.status == TradeStatus.CLOSED:
                closed += 1
            elif outcome.status == TradeStatus.OPEN:
                open_ += 1

            if outcome.profit_loss is None:
                continue
            realized.append(outcome.profit_loss)
            if outcome.profit_loss > 0:
                wins.append(outcome.profit_loss)
            elif outcome.profit_loss < 0:
                losses.append(outcome.profit_loss)
            # break-even trades count toward neither side

        # win rate is measured against closed trades, not all trades
        win_rate = quantize_money(Decimal(len(wins)) / closed * 100) if closed else ZERO

        return TradeStatistics(
            total_trades=total,
            closed_trades=closed,
            open_trades=open_,
            winning_trades=len(wins),
            losing_trades=len(losses),
            win_rate=win_rate,
            total_profit_loss=quantize_money(sum(realized, ZERO)),
            avg_win=_mean(wins),
            avg_loss=_mean(losses),
            best_trade=quantize_money(max(realized)) if realized else ZERO,
            worst_trade=quantize_money(min(realized)) if realized else ZERO,
        )


def _mean(values) -> Decimal:
    if not values:
        return ZERO
    return quantize_money(sum(values, ZERO) / len(values))
