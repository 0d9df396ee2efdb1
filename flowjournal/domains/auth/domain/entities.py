"""Auth domain entities."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from ....shared.exceptions.base import ValidationError
from ....shared.kernel.entity import Entity
from .value_objects import UserRole, normalize_email


class User(Entity):
    """User aggregate: credentials, verification state and onboarding gate.

    State machine::

        unverified --verify--> verified
        unverified --resend--> unverified (new token)
        verified + onboarded --login--> session
        federated (created verified, no password) --complete_onboarding--> onboarded
    """

    def __init__(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: Optional[str] = None,
        role: UserRole = UserRole.TRADER,
        team_id: Optional[UUID] = None,
        email_verified: bool = False,
        verification_token: Optional[str] = None,
        verification_token_expires_at: Optional[datetime] = None,
        consumed_token_digest: Optional[str] = None,
        external_id: Optional[str] = None,
        onboarding_completed: bool = False,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at, updated_at)
        self._email = normalize_email(email)
        self._first_name = first_name
        self._last_name = last_name
        self._password_hash = password_hash or None
        self._role = UserRole(role)
        self._team_id = team_id
        self._email_verified = email_verified
        self._verification_token = verification_token
        self._verification_token_expires_at = verification_token_expires_at
        self._consumed_token_digest = consumed_token_digest
        self._external_id = external_id
        self._onboarding_completed = onboarding_completed

    @classmethod
    def register(
        cls,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.TRADER,
        team_id: Optional[UUID] = None,
    ) -> "User":
        """New password account. Unverified until the emailed token is consumed."""
        return cls(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            role=role,
            team_id=team_id,
            email_verified=False,
            onboarding_completed=True,
        )

    @classmethod
    def from_external_identity(
        cls,
        external_id: str,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> "User":
        """New federated-only account.

        The provider's email claim is trusted as verified. The account has no
        password and must pass onboarding before it is fully provisioned.
        """
        return cls(
            email=email,
            first_name=first_name or "User",
            last_name=last_name or "",
            password_hash=None,
            role=UserRole.TRADER,
            email_verified=True,
            external_id=external_id,
            onboarding_completed=False,
        )

    # Verification

    def issue_verification_token(self, token: str, expires_at: datetime) -> None:
        """Replace any previous token."""
        self._verification_token = token
        self._verification_token_expires_at = expires_at
        self._touch()

    def is_verification_expired(self, now: datetime) -> bool:
        """Strictly after the expiry instant; the instant itself is still valid."""
        if self._verification_token_expires_at is None:
            return True
        return now > self._verification_token_expires_at

    def verify_email(self, consumed_token_digest: Optional[str] = None) -> None:
        """Mark verified and clear the token.

        A digest of the consumed token is kept so a stale link clicked again
        can still be recognised as belonging to this, now verified, user.
        """
        self._email_verified = True
        self._consumed_token_digest = consumed_token_digest
        self._verification_token = None
        self._verification_token_expires_at = None
        self._touch()

    # Identity and onboarding

    def link_external_identity(self, external_id: str) -> bool:
        """Attach a provider subject if none is linked yet. Returns True if changed."""
        if self._external_id:
            return False
        self._external_id = external_id
        self._touch()
        return True

    def complete_onboarding(
        self,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> None:
        if not password_hash:
            raise ValidationError("Password is required", field="password")
        self._password_hash = password_hash
        if first_name:
            self._first_name = first_name
        if last_name:
            self._last_name = last_name
        self._onboarding_completed = True
        self._touch()

    @property
    def is_federated_only(self) -> bool:
        return bool(self._external_id) and not self._password_hash

    @property
    def needs_onboarding(self) -> bool:
        return not self._onboarding_completed

    @property
    def can_login(self) -> bool:
        """Password login requires a verified email."""
        return self._email_verified

    @property
    def email(self) -> str:
        return self._email

    @property
    def first_name(self) -> str:
        return self._first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @property
    def password_hash(self) -> Optional[str]:
        return self._password_hash

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def team_id(self) -> Optional[UUID]:
        return self._team_id

    @property
    def email_verified(self) -> bool:
        return self._email_verified

    @property
    def verification_token(self) -> Optional[str]:
        return self._verification_token

    @property
    def verification_token_expires_at(self) -> Optional[datetime]:
        return self._verification_token_expires_at

    @property
    def consumed_token_digest(self) -> Optional[str]:
        return self._consumed_token_digest

    @property
    def external_id(self) -> Optional[str]:
        return self._external_id

    @property
    def onboarding_completed(self) -> bool:
        return self._onboarding_completed
