"""Password hashing with bcrypt."""

import bcrypt
import structlog

from ...shared.exceptions.base import SecurityError
from ..config.settings import SecurityConfig

logger = structlog.get_logger()

# bcrypt ignores everything past 72 bytes; newer releases raise instead.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """One-way adaptive hashing of user passwords.

    Length and strength policy belong to the caller; any string, even an
    empty one, can be hashed.
    """

    def __init__(self, config: SecurityConfig):
        self.rounds = config.password_hash_rounds

    def hash(self, password: str) -> str:
        """Hash password with a fresh bcrypt salt."""
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(_encode(password), salt)
        except Exception as e:
            logger.error("Password hashing failed", error=str(e))
            raise SecurityError(f"Password hashing failed: {e}") from e

        logger.debug("Password hashed", salt_rounds=self.rounds)
        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Verify password against hash. Empty or malformed hashes never match."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification against malformed hash", error=str(e))
            return False
