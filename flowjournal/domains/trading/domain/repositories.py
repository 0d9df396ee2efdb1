"""Trading domain repository interfaces."""

from abc import abstractmethod
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from ....shared.kernel.repository import Repository
from .entities import Trade
from .value_objects import TradeFilters, TradeStatus


class TradeRepository(Repository[Trade]):
    """Trade repository interface.

    ``owner_id=None`` means unscoped access across all users.
    """

    @abstractmethod
    async def find(self, trade_id: UUID, owner_id: Optional[UUID]) -> Optional[Trade]:
        """Find a trade, visible only to its owner unless unscoped."""
        pass

    @abstractmethod
    async def list(
        self,
        owner_id: Optional[UUID],
        filters: TradeFilters,
        offset: int,
        limit: int,
    ) -> List[Trade]:
        """Newest entry first."""
        pass

    @abstractmethod
    async def remove(self, trade: Trade) -> None:
        pass

    @abstractmethod
    async def list_outcomes(
        self, owner_id: Optional[UUID]
    ) -> List[Tuple[TradeStatus, Optional[Decimal]]]:
        """(status, profit_loss) for every trade in scope."""
        pass
