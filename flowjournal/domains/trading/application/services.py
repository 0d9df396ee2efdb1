"""Trade ledger: validated, ownership-scoped trade storage."""

from dataclasses import dataclass
from typing import Callable, List, Optional
from uuid import UUID

import structlog

from ....shared.exceptions.base import NotFoundError, ValidationError
from ....shared.kernel.repository import UnitOfWork
from ...auth.domain.entities import User
from ..domain.entities import Trade
from ..domain.value_objects import TradeDraft, TradeFilters, TradePatch

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
# keeps the row offset inside a 64-bit integer
MAX_PAGE = 1_000_000


@dataclass(frozen=True)
class TradePage:
    trades: List[Trade]
    page: int
    limit: int


def owner_scope(actor: User) -> Optional[UUID]:
    """Admins see every trade; everyone else only their own."""
    return None if actor.role.is_admin else actor.id


class TradeLedger:
    """Create, read, update and delete trades on behalf of an actor.

    A trade that exists but belongs to someone else is reported as not
    found, so existence never leaks across accounts.
    """

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def create(self, actor: User, draft: TradeDraft) -> Trade:
        trade = Trade.create(actor.id, draft)
        async with self._uow_factory() as uow:
            await uow.trades.add(trade)

        logger.info(
            "Trade created",
            trade_id=str(trade.id),
            user_id=str(actor.id),
            symbol=trade.symbol,
            status=trade.status.value,
        )
        return trade

    async def update(self, actor: User, trade_id: UUID, patch: TradePatch) -> Trade:
        async with self._uow_factory() as uow:
            trade = await self._require(uow, actor, trade_id)
            trade.apply_patch(patch)
            await uow.trades.save(trade)

        logger.info(
            "Trade updated",
            trade_id=str(trade.id),
            user_id=str(actor.id),
            fields=sorted(patch.model_fields_set),
        )
        return trade

    async def get(self, actor: User, trade_id: UUID) -> Trade:
        async with self._uow_factory() as uow:
            return await self._require(uow, actor, trade_id)

    async def list(
        self,
        actor: User,
        filters: Optional[TradeFilters] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> TradePage:
        if not 1 <= page <= MAX_PAGE:
            raise ValidationError(f"page must be between 1 and {MAX_PAGE}", field="page")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}", field="limit")

        async with self._uow_factory() as uow:
            trades = await uow.trades.list(
                owner_scope(actor),
                filters or TradeFilters(),
                offset=(page - 1) * limit,
                limit=limit,
            )
        return TradePage(trades=trades, page=page, limit=limit)

    async def delete(self, actor: User, trade_id: UUID) -> None:
        async with self._uow_factory() as uow:
            trade = await self._require(uow, actor, trade_id)
            await uow.trades.remove(trade)

        logger.info("Trade deleted", trade_id=str(trade_id), user_id=str(actor.id))

    async def _require(self, uow: UnitOfWork, actor: User, trade_id: UUID) -> Trade:
        trade = await uow.trades.find(trade_id, owner_scope(actor))
        if trade is None:
            raise NotFoundError("Trade")
        return trade
