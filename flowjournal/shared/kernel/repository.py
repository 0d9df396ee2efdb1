"""Repository and unit of work abstractions."""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from .entity import Entity

T = TypeVar("T", bound=Entity)


class Repository(ABC, Generic[T]):
    """Base repository interface."""

    @abstractmethod
    async def add(self, entity: T) -> None:
        """Stage a new entity for insertion."""

    @abstractmethod
    async def save(self, entity: T) -> None:
        """Stage changes to an existing entity."""

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[T]:
        """Get entity by ID."""


class UnitOfWork(ABC):
    """Transaction boundary around one or more repositories.

    ``async with uow:`` commits when the block exits cleanly and rolls back
    when it raises.
    """

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
