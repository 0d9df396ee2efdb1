"""Auth domain repository interfaces."""

from abc import abstractmethod
from typing import Optional
from uuid import UUID

from ....shared.kernel.repository import Repository
from .entities import User


class UserRepository(Repository[User]):
    """User repository interface."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email, case-insensitively."""
        pass

    @abstractmethod
    async def find_by_external_id(self, external_id: str) -> Optional[User]:
        """Find user by third-party identity subject."""
        pass

    @abstractmethod
    async def find_by_verification_token(self, token: str) -> Optional[User]:
        """Find user by email verification token."""
        pass

    @abstractmethod
    async def find_by_consumed_token_digest(self, digest: str) -> Optional[User]:
        """Find the user who already consumed the token with this digest."""
        pass

    @abstractmethod
    async def create_default_settings(self, user_id: UUID) -> None:
        """Stage the default settings row for a new user."""
        pass

    @abstractmethod
    async def delete(self, user_id: UUID) -> None:
        """Hard-delete the user together with every row they own."""
        pass
