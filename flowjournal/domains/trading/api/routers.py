"""Trading API routers."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ....dependencies import get_onboarded_user, get_trade_ledger
from ...auth.domain.entities import User
from ..application.services import DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE, TradeLedger
from ..domain.value_objects import TradeDraft, TradeFilters, TradePatch, TradeStatus, TradeType
from .schemas import MessageResponse, TradeListResponse, TradeResponse

router = APIRouter(prefix="/trades", tags=["trades"])


@router.post("", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
async def create_trade(
    draft: TradeDraft,
    user: User = Depends(get_onboarded_user),
    ledger: TradeLedger = Depends(get_trade_ledger),
) -> TradeResponse:
    trade = await ledger.create(user, draft)
    return TradeResponse.from_trade(trade)


@router.get("", response_model=TradeListResponse)
async def list_trades(
    status_filter: Optional[TradeStatus] = Query(None, alias="status"),
    symbol: Optional[str] = Query(None, max_length=20),
    trade_type: Optional[TradeType] = Query(None, alias="type"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(get_onboarded_user),
    ledger: TradeLedger = Depends(get_trade_ledger),
) -> TradeListResponse:
    """Newest entry date first."""
    filters = TradeFilters(status=status_filter, symbol=symbol, type=trade_type)
    result = await ledger.list(user, filters, page=page, limit=limit)
    return TradeListResponse(
        trades=[TradeResponse.from_trade(trade) for trade in result.trades],
        page=result.page,
        limit=result.limit,
    )


@router.get("/{trade_id}", response_model=TradeResponse)
async def get_trade(
    trade_id: UUID,
    user: User = Depends(get_onboarded_user),
    ledger: TradeLedger = Depends(get_trade_ledger),
) -> TradeResponse:
    trade = await ledger.get(user, trade_id)
    return TradeResponse.from_trade(trade)


@router.put("/{trade_id}", response_model=TradeResponse)
async def update_trade(
    trade_id: UUID,
    patch: TradePatch,
    user: User = Depends(get_onboarded_user),
    ledger: TradeLedger = Depends(get_trade_ledger),
) -> TradeResponse:
    """Partial update: fields left out of the body are untouched."""
    trade = await ledger.update(user, trade_id, patch)
    return TradeResponse.from_trade(trade)


@router.delete("/{trade_id}", response_model=MessageResponse)
async def delete_trade(
    trade_id: UUID,
    user: User = Depends(get_onboarded_user),
    ledger: TradeLedger = Depends(get_trade_ledger),
) -> MessageResponse:
    await ledger.delete(user, trade_id)
    return MessageResponse(message="Trade deleted successfully")
