"""Signed bearer session tokens."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

import jwt
import structlog

from ...shared.exceptions.base import InvalidTokenError
from ...shared.utils.time import Clock, utcnow
from ..config.settings import SecurityConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims embedded in a session token."""

    user_id: UUID
    email: Optional[str] = None
    role: Optional[str] = None


class TokenIssuer:
    """Mints and verifies HMAC-signed JWT session tokens.

    There is no revocation list: a token stays valid until ``exp`` passes,
    so logging out is the client discarding its token.
    """

    def __init__(self, config: SecurityConfig, clock: Clock = utcnow):
        self._secret_key = config.jwt_secret_key.get_secret_value()
        self._algorithm = config.jwt_algorithm
        self._lifetime = timedelta(minutes=config.access_token_expire_minutes)
        self._clock = clock

    def issue(self, claims: TokenClaims) -> str:
        now = self._clock()
        payload = {
            "sub": str(claims.user_id),
            "email": claims.email,
            "role": claims.role,
            "iat": now,
            "exp": now + self._lifetime,
        }
        token = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

        logger.debug("Session token issued", user_id=str(claims.user_id))
        return token

    def verify(self, token: str) -> TokenClaims:
        """Return the claims of a valid token.

        Expired, tampered and malformed tokens all raise the same
        InvalidTokenError.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
            return TokenClaims(
                user_id=UUID(payload["sub"]),
                email=payload.get("email"),
                role=payload.get("role"),
            )
        except (jwt.InvalidTokenError, ValueError, TypeError) as e:
            logger.info("Session token rejected", reason=type(e).__name__)
            raise InvalidTokenError() from e
