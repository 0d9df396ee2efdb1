"""Database configuration and session management."""

from datetime import datetime
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import DateTime, MetaData, event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from ...shared.utils.time import ensure_utc
from ..config.settings import DatabaseConfig

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""

    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s",
        }
    )


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that is always stored and loaded as UTC.

    SQLite drops tzinfo on the way back, so loaded values are re-tagged.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        return ensure_utc(value)

    def process_result_value(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        return ensure_utc(value)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Database manager for async SQLAlchemy operations."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        url = config.connection_url

        if config.is_sqlite:
            self._engine: AsyncEngine = create_async_engine(url, echo=config.echo)
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self._engine = create_async_engine(
                url,
                echo=config.echo,
                pool_pre_ping=True,
                pool_size=config.pool_size,
                max_overflow=config.max_overflow,
                pool_recycle=config.pool_recycle,
            )

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def session_factory(self) -> async_sessionmaker:
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all database tables."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured", tables=sorted(Base.metadata.tables))

    async def drop_tables(self) -> None:
        """Drop all database tables."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session."""
        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("Database health check failed", error=str(exc))
            return False

    async def close(self) -> None:
        """Close database engine."""
        await self._engine.dispose()
