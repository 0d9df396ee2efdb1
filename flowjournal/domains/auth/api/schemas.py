"""Auth API schemas (DTOs)."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from ....shared.kernel.schema import CamelModel
from ..domain.entities import User
from ..domain.value_objects import UserRole

SELF_SERVICE_ROLES = (UserRole.TRADER, UserRole.VIEWER)


class RegisterUserRequest(CamelModel):
    """Request schema for user registration."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=8, description="Password")
    first_name: str = Field(..., min_length=2, max_length=100, description="First name")
    last_name: str = Field(..., min_length=2, max_length=100, description="Last name")
    role: Optional[UserRole] = Field(None, description="trader or viewer")
    team_id: Optional[UUID] = Field(None, description="Team to join")

    @field_validator("role")
    @classmethod
    def restrict_self_service_roles(cls, v: Optional[UserRole]) -> Optional[UserRole]:
        if v is not None and v not in SELF_SERVICE_ROLES:
            raise ValueError("Only trader or viewer can be chosen at registration")
        return v


class LoginRequest(CamelModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class ResendVerificationRequest(CamelModel):
    email: EmailStr = Field(..., description="Email address")


class CompleteOnboardingRequest(CamelModel):
    """Password is length-checked by the service so the message is consistent."""

    password: str = Field(..., description="New password")
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class UserResponse(CamelModel):
    """Response schema for user information."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    team_id: Optional[UUID] = None
    email_verified: bool
    onboarding_completed: bool
    has_password: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            team_id=user.team_id,
            email_verified=user.email_verified,
            onboarding_completed=user.onboarding_completed,
            has_password=bool(user.password_hash),
            created_at=user.created_at,
        )


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse


class LoginResponse(CamelModel):
    """Response schema for successful login."""

    user: UserResponse
    token: str


class VerifyEmailResponse(CamelModel):
    verified: bool = True
    already_verified: bool = False
    message: str
    token: str
    user: UserResponse


class UserEnvelope(CamelModel):
    user: UserResponse


class MessageResponse(CamelModel):
    message: str
