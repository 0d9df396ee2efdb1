"""SQLAlchemy models for auth domain."""

from sqlalchemy import Boolean, Column, ForeignKey, String, Text, Uuid

from ....infrastructure.persistence.database import Base, UTCDateTime
from ....shared.utils.time import utcnow


class UserModel(Base):
    """SQLAlchemy model for User aggregate."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=True)

    # Profile
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    role = Column(String(20), nullable=False, default="trader", index=True)
    team_id = Column(Uuid, nullable=True)

    # Email verification
    email_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(128), nullable=True, unique=True, index=True)
    verification_token_expires_at = Column(UTCDateTime, nullable=True)
    consumed_token_digest = Column(String(64), nullable=True, index=True)

    # Federated identity and onboarding
    external_id = Column(String(255), nullable=True, unique=True, index=True)
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"


class UserSettingsModel(Base):
    """Per-user preferences. Only the default row is managed here."""

    __tablename__ = "user_settings"

    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    theme = Column(String(20), nullable=False, default="light")
    language = Column(String(10), nullable=False, default="en")
    currency = Column(String(3), nullable=False, default="USD")
    timezone = Column(String(64), nullable=False, default="UTC")
    enable_notifications = Column(Boolean, nullable=False, default=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)
