"""Trading API schemas (DTOs)."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ....shared.kernel.schema import CamelModel
from ..domain.entities import Trade
from ..domain.value_objects import TradeDirection, TradeStatus, TradeType


class TradeResponse(CamelModel):
    """Response schema for a trade. Money fields serialize as strings."""

    id: UUID
    user_id: UUID
    symbol: str
    type: TradeType
    direction: TradeDirection
    entry_price: Decimal
    exit_price: Optional[Decimal] = None
    quantity: Decimal
    fees: Decimal
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    entry_date: datetime
    exit_date: Optional[datetime] = None
    status: TradeStatus
    profit_loss: Optional[Decimal] = None
    profit_loss_percent: Optional[Decimal] = None
    notes: Optional[str] = None
    tags: List[str]
    screenshots: List[str]
    strategy_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_trade(cls, trade: Trade) -> "TradeResponse":
        return cls(
            id=trade.id,
            user_id=trade.user_id,
            symbol=trade.symbol,
            type=trade.type,
            direction=trade.direction,
            entry_price=trade.entry_price,
            exit_price=trade.exit_price,
            quantity=trade.quantity,
            fees=trade.fees,
            stop_loss=trade.stop_loss,
            take_profit=trade.take_profit,
            entry_date=trade.entry_date,
            exit_date=trade.exit_date,
            status=trade.status,
            profit_loss=trade.profit_loss,
            profit_loss_percent=trade.profit_loss_percent,
            notes=trade.notes,
            tags=trade.tags,
            screenshots=trade.screenshots,
            strategy_id=trade.strategy_id,
            created_at=trade.created_at,
            updated_at=trade.updated_at,
        )


class TradeListResponse(CamelModel):
    trades: List[TradeResponse]
    page: int
    limit: int


class MessageResponse(CamelModel):
    message: str
