"""Account lifecycle: registration, login, verification, identity linking."""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from ....infrastructure.mail.mailer import VerificationMailer
from ....infrastructure.oauth.google import ExternalIdentity
from ....infrastructure.security.authentication import TokenClaims, TokenIssuer
from ....infrastructure.security.hashing import PasswordHasher
from ....shared.exceptions.base import (
    EmailNotVerifiedError,
    ExternalServiceError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    UserAlreadyExistsError,
    ValidationError,
)
from ....shared.kernel.repository import UnitOfWork
from ..domain.entities import User
from ..domain.services import IssuedVerificationToken, VerificationTokenManager
from ..domain.value_objects import UserRole, normalize_email
from .commands import CompleteOnboardingCommand, RegisterUserCommand

logger = structlog.get_logger()


@dataclass(frozen=True)
class VerificationResult:
    user: User
    token: str
    already_verified: bool


class AccountDirectory:
    """Owns the user record lifecycle and the auth state machine."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        hasher: PasswordHasher,
        token_issuer: TokenIssuer,
        verification_tokens: VerificationTokenManager,
        mailer: VerificationMailer,
        min_password_length: int = 8,
    ) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher
        self._token_issuer = token_issuer
        self._verification = verification_tokens
        self._mailer = mailer
        self._min_password_length = min_password_length

    async def register(self, command: RegisterUserCommand) -> User:
        """Create an unverified account and email its verification link.

        No session token is returned; verification comes first.
        """
        email = normalize_email(command.email)
        password_hash = await self._hash(command.password)

        try:
            async with self._uow_factory() as uow:
                if await uow.users.find_by_email(email) is not None:
                    raise UserAlreadyExistsError()

                user = User.register(
                    email=email,
                    password_hash=password_hash,
                    first_name=command.first_name,
                    last_name=command.last_name,
                    role=command.role or UserRole.TRADER,
                    team_id=command.team_id,
                )
                issued = self._verification.issue(user)
                await uow.users.add(user)
                await uow.users.create_default_settings(user.id)
        except IntegrityError as e:
            # lost a race against a concurrent registration of the same email
            raise UserAlreadyExistsError() from e

        logger.info("User registered", user_id=str(user.id), role=user.role.value)

        try:
            await self._send_verification(user, issued)
        except ExternalServiceError:
            logger.warning(
                "Verification email failed after registration, user can request a resend",
                user_id=str(user.id),
            )
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        async with self._uow_factory() as uow:
            user = await uow.users.find_by_email(normalize_email(email))

        if user is None or not await self._verify(password, user.password_hash):
            logger.info("Login rejected", reason="invalid_credentials")
            raise InvalidCredentialsError()

        if not user.can_login:
            logger.info("Login rejected", reason="email_not_verified", user_id=str(user.id))
            raise EmailNotVerifiedError()

        logger.info("User logged in", user_id=str(user.id))
        return user, self.session_token_for(user)

    async def verify_email(self, token: str) -> VerificationResult:
        async with self._uow_factory() as uow:
            user, already_verified = await self._verification.consume(uow.users, token)

        return VerificationResult(
            user=user,
            token=self.session_token_for(user),
            already_verified=already_verified,
        )

    async def resend_verification(self, email: str) -> None:
        async with self._uow_factory() as uow:
            user, issued = await self._verification.resend(uow.users, email)

        try:
            await self._send_verification(user, issued)
        except ExternalServiceError as e:
            raise InternalError("Failed to send verification email") from e

    async def login_or_create_via_identity(self, identity: ExternalIdentity) -> User:
        """Sign in with a third-party identity, linking or creating the account.

        The provider's email claim is trusted as verified; it does not go
        through the verification token flow.
        """
        email = normalize_email(identity.email)

        async with self._uow_factory() as uow:
            user = await uow.users.find_by_external_id(identity.external_id)
            if user is None:
                user = await uow.users.find_by_email(email)

            if user is not None:
                if user.link_external_identity(identity.external_id):
                    await uow.users.save(user)
                    logger.info("External identity linked", user_id=str(user.id))
                return user

            user = User.from_external_identity(
                external_id=identity.external_id,
                email=email,
                first_name=identity.given_name,
                last_name=identity.family_name,
            )
            await uow.users.add(user)
            await uow.users.create_default_settings(user.id)

        logger.info("User created from external identity", user_id=str(user.id))
        return user

    async def complete_onboarding(self, command: CompleteOnboardingCommand) -> User:
        if len(command.password) < self._min_password_length:
            raise ValidationError(
                f"Password must be at least {self._min_password_length} characters",
                field="password",
            )
        password_hash = await self._hash(command.password)

        async with self._uow_factory() as uow:
            user = await self._require(uow, command.user_id)
            user.complete_onboarding(password_hash, command.first_name, command.last_name)
            await uow.users.save(user)

        logger.info("Onboarding completed", user_id=str(user.id))
        return user

    async def delete_account(self, user_id: UUID) -> None:
        """Irreversibly delete the user and everything they own."""
        async with self._uow_factory() as uow:
            await self._require(uow, user_id)
            await uow.users.delete(user_id)

        logger.info("Account deleted", user_id=str(user_id))

    async def get_user(self, user_id: UUID) -> User:
        async with self._uow_factory() as uow:
            return await self._require(uow, user_id)

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its current user record."""
        claims = self._token_issuer.verify(token)
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(claims.user_id)
        if user is None:
            raise InvalidTokenError()
        return user

    def session_token_for(self, user: User) -> str:
        return self._token_issuer.issue(
            TokenClaims(user_id=user.id, email=user.email, role=user.role.value)
        )

    async def _require(self, uow: UnitOfWork, user_id: UUID) -> User:
        user = await uow.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")
        return user

    async def _send_verification(self, user: User, issued: IssuedVerificationToken) -> None:
        await self._mailer.send_verification_email(
            user.email,
            user.first_name,
            issued.link,
            ttl_hours=int(self._verification.ttl.total_seconds() // 3600),
        )

    # bcrypt is CPU bound, run it off the event loop
    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hasher.hash, password)

    async def _verify(self, password: str, password_hash: Optional[str]) -> bool:
        return await asyncio.to_thread(self._hasher.verify, password, password_hash or "")
