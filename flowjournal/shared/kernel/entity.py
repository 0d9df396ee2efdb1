"""Base entity abstraction."""

from abc import ABC
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from ..utils.time import utcnow


class Entity(ABC):
    """Base entity with identity and audit timestamps."""

    def __init__(
        self,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        now = utcnow()
        self._id = id or uuid4()
        self._created_at = created_at or now
        self._updated_at = updated_at or self._created_at

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def _touch(self, now: Optional[datetime] = None) -> None:
        """Update the updated_at timestamp."""
        self._updated_at = now or utcnow()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entity):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)
