"""Auth application commands."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from ..domain.value_objects import UserRole


class RegisterUserCommand(BaseModel):
    """Command to register a new user."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    role: Optional[UserRole] = None
    team_id: Optional[UUID] = None


class CompleteOnboardingCommand(BaseModel):
    """Command to finish provisioning an account by setting its password."""

    user_id: UUID
    password: str
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
