"""Statistics queries."""

from enum import Enum
from typing import Callable

import structlog

from ....shared.exceptions.base import AuthorizationError
from ....shared.kernel.repository import UnitOfWork
from ...auth.domain.entities import User
from ..domain.statistics import StatsAggregator, TradeOutcome, TradeStatistics

logger = structlog.get_logger()


class StatsScope(str, Enum):
    OWN = "own"
    ALL = "all"


class StatisticsService:
    """Computes performance statistics for an actor's scope."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def compute_stats(self, actor: User, scope: StatsScope = StatsScope.OWN) -> TradeStatistics:
        if scope == StatsScope.ALL and not actor.role.is_admin:
            raise AuthorizationError("Only admins can view statistics across all trades")

        owner_id = None if scope == StatsScope.ALL else actor.id
        async with self._uow_factory() as uow:
            rows = await uow.trades.list_outcomes(owner_id)

        stats = StatsAggregator.aggregate(
            TradeOutcome(status=status, profit_loss=profit_loss) for status, profit_loss in rows
        )
        logger.debug("Statistics computed", user_id=str(actor.id), scope=scope.value, total=stats.total_trades)
        return stats
