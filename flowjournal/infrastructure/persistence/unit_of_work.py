"""SQLAlchemy unit of work."""

from types import TracebackType
from typing import Optional, Type

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domains.auth.infrastructure.repositories import SqlAlchemyUserRepository
from ...domains.trading.infrastructure.repositories import SqlAlchemyTradeRepository
from ...shared.kernel.repository import UnitOfWork

logger = structlog.get_logger()


class SqlAlchemyUnitOfWork(UnitOfWork):
    """One session, one transaction.

    Repositories only flush. Leaving the block commits, or rolls back if it
    raised, so multi-statement operations either land together or not at all.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.users = SqlAlchemyUserRepository(self._session)
        self.trades = SqlAlchemyTradeRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except Exception:
            logger.warning("Transaction commit failed, rolling back")
            await self._session.rollback()
            raise

    async def rollback(self) -> None:
        await self._session.rollback()
