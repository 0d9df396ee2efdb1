"""Auth infrastructure repository implementations."""

from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.entities import User
from ..domain.repositories import UserRepository
from ..domain.value_objects import UserRole
from .models import UserModel, UserSettingsModel


class SqlAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of UserRepository.

    Changes are flushed, never committed; the unit of work owns the
    transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entity: User) -> None:
        self._session.add(self._create_model_from_aggregate(entity))
        await self._session.flush()

    async def save(self, entity: User) -> None:
        model = await self._session.get(UserModel, entity.id)
        if model is None:
            await self.add(entity)
            return
        self._update_model_from_aggregate(model, entity)
        await self._session.flush()

    async def get_by_id(self, id: UUID) -> Optional[User]:
        model = await self._session.get(UserModel, id)
        return self._create_aggregate_from_model(model) if model else None

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(UserModel).where(func.lower(UserModel.email) == email.lower())
        return await self._one(stmt)

    async def find_by_external_id(self, external_id: str) -> Optional[User]:
        stmt = select(UserModel).where(UserModel.external_id == external_id)
        return await self._one(stmt)

    async def find_by_verification_token(self, token: str) -> Optional[User]:
        stmt = select(UserModel).where(UserModel.verification_token == token)
        return await self._one(stmt)

    async def find_by_consumed_token_digest(self, digest: str) -> Optional[User]:
        stmt = select(UserModel).where(UserModel.consumed_token_digest == digest)
        return await self._one(stmt)

    async def create_default_settings(self, user_id: UUID) -> None:
        self._session.add(UserSettingsModel(user_id=user_id))
        await self._session.flush()

    async def delete(self, user_id: UUID) -> None:
        # trades and user_settings go with it through ON DELETE CASCADE
        await self._session.execute(delete(UserModel).where(UserModel.id == user_id))
        await self._session.flush()

    async def _one(self, stmt) -> Optional[User]:
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._create_aggregate_from_model(model) if model else None

    def _create_model_from_aggregate(self, user: User) -> UserModel:
        model = UserModel(id=user.id, created_at=user.created_at)
        self._update_model_from_aggregate(model, user)
        return model

    def _update_model_from_aggregate(self, model: UserModel, user: User) -> None:
        model.email = user.email
        model.password_hash = user.password_hash
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.role = user.role.value
        model.team_id = user.team_id
        model.email_verified = user.email_verified
        model.verification_token = user.verification_token
        model.verification_token_expires_at = user.verification_token_expires_at
        model.consumed_token_digest = user.consumed_token_digest
        model.external_id = user.external_id
        model.onboarding_completed = user.onboarding_completed
        model.updated_at = user.updated_at

    def _create_aggregate_from_model(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
            password_hash=model.password_hash,
            role=UserRole(model.role),
            team_id=model.team_id,
            email_verified=model.email_verified,
            verification_token=model.verification_token,
            verification_token_expires_at=model.verification_token_expires_at,
            consumed_token_digest=model.consumed_token_digest,
            external_id=model.external_id,
            onboarding_completed=model.onboarding_completed,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
