"""Analytics API routers."""

from fastapi import APIRouter, Depends, Query

from ....dependencies import get_onboarded_user, get_statistics_service
from ...auth.domain.entities import User
from ..application.services import StatisticsService, StatsScope
from .schemas import TradeStatisticsResponse

# Shares the /trades prefix; must be included before the trading router so
# /trades/stats is not captured by /trades/{trade_id}.
router = APIRouter(prefix="/trades", tags=["analytics"])


@router.get("/stats", response_model=TradeStatisticsResponse)
async def get_trade_stats(
    scope: StatsScope = Query(StatsScope.OWN),
    user: User = Depends(get_onboarded_user),
    statistics: StatisticsService = Depends(get_statistics_service),
) -> TradeStatisticsResponse:
    """Performance statistics over the caller's trades, or all trades for admins."""
    stats = await statistics.compute_stats(user, scope)
    return TradeStatisticsResponse.from_statistics(stats)
