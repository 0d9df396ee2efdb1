"""Auth value objects."""

from enum import Enum

from ....shared.exceptions.base import ValidationError


class UserRole(str, Enum):
    """User role. Admins bypass ownership scoping on trades and statistics."""

    ADMIN = "admin"
    MANAGER = "manager"
    TRADER = "trader"
    VIEWER = "viewer"

    @property
    def is_admin(self) -> bool:
        return self is UserRole.ADMIN


def normalize_email(value: str) -> str:
    """Canonical form used for uniqueness and lookups."""
    email = (value or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationError("Invalid email address", field="email")
    return email
