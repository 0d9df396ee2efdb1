"""Analytics API schemas (DTOs)."""

from decimal import Decimal

from ....shared.kernel.schema import CamelModel
from ..domain.statistics import TradeStatistics


class TradeStatisticsResponse(CamelModel):
    total_trades: int
    closed_trades: int
    open_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: Decimal
    total_profit_loss: Decimal
    avg_win: Decimal
    avg_loss: Decimal
    best_trade: Decimal
    worst_trade: Decimal

    @classmethod
    def from_statistics(cls, stats: TradeStatistics) -> "TradeStatisticsResponse":
        return cls(**stats.__dict__)
