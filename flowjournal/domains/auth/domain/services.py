"""Email verification token lifecycle."""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Tuple
from urllib.parse import urlencode

import structlog

from ....shared.exceptions.base import (
    AlreadyVerifiedError,
    InvalidVerificationTokenError,
    NotFoundError,
    VerificationTokenExpiredError,
)
from ....shared.utils.time import Clock, utcnow
from .entities import User
from .repositories import UserRepository
from .value_objects import normalize_email

logger = structlog.get_logger()

TOKEN_BYTES = 32


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IssuedVerificationToken:
    token: str
    expires_at: datetime
    link: str


class VerificationTokenManager:
    """Issues and consumes single-use email verification tokens.

    Tokens live on the user row. Consuming one clears it; an expired token is
    left in place so that only an explicit resend replaces it.
    """

    def __init__(
        self,
        frontend_url: str,
        ttl: timedelta = timedelta(hours=24),
        clock: Clock = utcnow,
    ) -> None:
        self.frontend_url = frontend_url.rstrip("/")
        self.ttl = ttl
        self._clock = clock

    def build_link(self, token: str) -> str:
        return f"{self.frontend_url}/verify-email?{urlencode({'token': token})}"

    def issue(self, user: User) -> IssuedVerificationToken:
        token = secrets.token_hex(TOKEN_BYTES)
        expires_at = self._clock() + self.ttl
        user.issue_verification_token(token, expires_at)

        logger.info("Verification token issued", user_id=str(user.id), expires_at=expires_at.isoformat())
        return IssuedVerificationToken(token=token, expires_at=expires_at, link=self.build_link(token))

    async def consume(self, users: UserRepository, token: str) -> Tuple[User, bool]:
        """Verify the owner of ``token``.

        Returns the user and whether it had already been verified. Repeating a
        successful verification is not an error.
        """
        if not token:
            raise InvalidVerificationTokenError()

        user = await users.find_by_verification_token(token)
        if user is None:
            user = await users.find_by_consumed_token_digest(token_digest(token))
        if user is None:
            raise InvalidVerificationTokenError()

        if user.email_verified:
            return user, True

        if user.is_verification_expired(self._clock()):
            logger.info("Verification token expired", user_id=str(user.id))
            raise VerificationTokenExpiredError()

        user.verify_email(token_digest(token))
        await users.save(user)

        logger.info("Email verified", user_id=str(user.id))
        return user, False

    async def resend(self, users: UserRepository, email: str) -> Tuple[User, IssuedVerificationToken]:
        user = await users.find_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("User")
        if user.email_verified:
            raise AlreadyVerifiedError()

        issued = self.issue(user)
        await users.save(user)
        return user, issued
