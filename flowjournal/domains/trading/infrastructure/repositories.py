"""Trading infrastructure repository implementations."""

from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.entities import Trade
from ..domain.repositories import TradeRepository
from ..domain.value_objects import TradeFilters, TradeStatus
from .models import TradeModel


class SqlAlchemyTradeRepository(TradeRepository):
    """SQLAlchemy implementation of TradeRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entity: Trade) -> None:
        model = TradeModel(id=entity.id, user_id=entity.user_id, created_at=entity.created_at)
        self._update_model_from_entity(model, entity)
        self._session.add(model)
        await self._session.flush()

    async def save(self, entity: Trade) -> None:
        model = await self._session.get(TradeModel, entity.id)
        if model is None:
            await self.add(entity)
            return
        self._update_model_from_entity(model, entity)
        await self._session.flush()

    async def get_by_id(self, id: UUID) -> Optional[Trade]:
        return await self.find(id, owner_id=None)

    async def find(self, trade_id: UUID, owner_id: Optional[UUID]) -> Optional[Trade]:
        stmt = select(TradeModel).where(TradeModel.id == trade_id)
        if owner_id is not None:
            stmt = stmt.where(TradeModel.user_id == owner_id)

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list(
        self,
        owner_id: Optional[UUID],
        filters: TradeFilters,
        offset: int,
        limit: int,
    ) -> List[Trade]:
        stmt = select(TradeModel)
        if owner_id is not None:
            stmt = stmt.where(TradeModel.user_id == owner_id)
        if filters.status is not None:
            stmt = stmt.where(TradeModel.status == filters.status.value)
        if filters.symbol:
            stmt = stmt.where(TradeModel.symbol == filters.symbol)
        if filters.type is not None:
            stmt = stmt.where(TradeModel.type == filters.type.value)

        # created_at and id make the order total when entry dates collide
        stmt = stmt.order_by(
            desc(TradeModel.entry_date),
            desc(TradeModel.created_at),
            desc(TradeModel.id),
        ).offset(offset).limit(limit)

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def remove(self, trade: Trade) -> None:
        model = await self._session.get(TradeModel, trade.id)
        if model is not None:
            await self._session.delete(model)
            await self._session.flush()

    async def list_outcomes(
        self, owner_id: Optional[UUID]
    ) -> List[Tuple[TradeStatus, Optional[Decimal]]]:
        stmt = select(TradeModel.status, TradeModel.profit_loss)
        if owner_id is not None:
            stmt = stmt.where(TradeModel.user_id == owner_id)

        result = await self._session.execute(stmt)
        return [(TradeStatus(status), profit_loss) for status, profit_loss in result.all()]

    def _update_model_from_entity(self, model: TradeModel, trade: Trade) -> None:
        model.symbol = trade.symbol
        model.type = trade.type.value
        model.direction = trade.direction.value
        model.entry_price = trade.entry_price
        model.exit_price = trade.exit_price
        model.quantity = trade.quantity
        model.fees = trade.fees
        model.stop_loss = trade.stop_loss
        model.take_profit = trade.take_profit
        model.entry_date = trade.entry_date
        model.exit_date = trade.exit_date
        model.status = trade.status.value
        model.profit_loss = trade.profit_loss
        model.profit_loss_percent = trade.profit_loss_percent
        model.notes = trade.notes
        model.tags = list(trade.tags)
        model.screenshots = list(trade.screenshots)
        model.strategy_id = trade.strategy_id
        model.updated_at = trade.updated_at

    def _to_entity(self, model: TradeModel) -> Trade:
        return Trade(
            id=model.id,
            user_id=model.user_id,
            symbol=model.symbol,
            type=model.type,
            direction=model.direction,
            entry_price=model.entry_price,
            exit_price=model.exit_price,
            quantity=model.quantity,
            fees=model.fees,
            stop_loss=model.stop_loss,
            take_profit=model.take_profit,
            entry_date=model.entry_date,
            exit_date=model.exit_date,
            status=model.status,
            profit_loss=model.profit_loss,
            profit_loss_percent=model.profit_loss_percent,
            notes=model.notes,
            tags=model.tags,
            screenshots=model.screenshots,
            strategy_id=model.strategy_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
