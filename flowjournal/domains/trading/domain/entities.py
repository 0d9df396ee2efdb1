"""Trading domain entities."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ....shared.exceptions.base import ValidationError
from ....shared.kernel.entity import Entity
from ....shared.utils.time import ensure_utc
from .services import realized_profit_loss
from .value_objects import TradeDirection, TradeDraft, TradePatch, TradeStatus, TradeType


class Trade(Entity):
    """A journaled trade owned by exactly one user.

    profit_loss and profit_loss_percent are derived at write time and cannot
    be set directly.
    """

    def __init__(
        self,
        user_id: UUID,
        symbol: str,
        type: TradeType,
        direction: TradeDirection,
        entry_price: Decimal,
        quantity: Decimal,
        entry_date: datetime,
        exit_price: Optional[Decimal] = None,
        fees: Decimal = Decimal("0"),
        stop_loss: Optional[Decimal] = None,
        take_profit: Optional[Decimal] = None,
        exit_date: Optional[datetime] = None,
        status: TradeStatus = TradeStatus.OPEN,
        profit_loss: Optional[Decimal] = None,
        profit_loss_percent: Optional[Decimal] = None,
        notes: Optional[str] = None,
        tags: Optional[List[str]] = None,
        screenshots: Optional[List[str]] = None,
        strategy_id: Optional[UUID] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at, updated_at)
        self.user_id = user_id
        self.symbol = symbol
        self.type = TradeType(type)
        self.direction = TradeDirection(direction)
        self.entry_price = entry_price
        self.exit_price = exit_price
        self.quantity = quantity
        self.fees = fees
        self.stop_loss = stop_loss
        self.take_profit = take_profit
        self.entry_date = ensure_utc(entry_date)
        self.exit_date = ensure_utc(exit_date) if exit_date else None
        self.status = TradeStatus(status)
        self._profit_loss = profit_loss
        self._profit_loss_percent = profit_loss_percent
        self.notes = notes
        self.tags = list(tags or [])
        self.screenshots = list(screenshots or [])
        self.strategy_id = strategy_id

    @classmethod
    def create(cls, user_id: UUID, draft: TradeDraft) -> "Trade":
        trade = cls(user_id=user_id, **draft.model_dump())
        trade._validate_dates()
        trade._recalculate()
        return trade

    def apply_patch(self, patch: TradePatch) -> None:
        """Apply only the fields present in the patch.

        Derived fields are recomputed from the effective post-patch values,
        and only when the patch touched one of their inputs.
        """
        for name, value in patch.changes().items():
            if name in ("entry_date", "exit_date") and value is not None:
                value = ensure_utc(value)
            setattr(self, name, value)

        self._validate_dates()
        if patch.touches_profit_loss:
            self._recalculate()
        self._touch()

    def _recalculate(self) -> None:
        result = realized_profit_loss(
            self.status,
            self.direction,
            self.entry_price,
            self.exit_price,
            self.quantity,
            self.fees,
        )
        if result is None:
            self._profit_loss = None
            self._profit_loss_percent = None
        else:
            self._profit_loss = result.amount
            self._profit_loss_percent = result.percent

    def _validate_dates(self) -> None:
        if self.exit_date is not None and self.exit_date < self.entry_date:
            raise ValidationError("Exit date cannot be before entry date", field="exitDate")

    @property
    def profit_loss(self) -> Optional[Decimal]:
        return self._profit_loss

    @property
    def profit_loss_percent(self) -> Optional[Decimal]:
        return self._profit_loss_percent
