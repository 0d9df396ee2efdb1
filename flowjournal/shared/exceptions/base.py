"""Base exception hierarchy for the application.

Every domain and application error carries the HTTP status it maps to, so the
terminal error handler never has to guess.
"""

from typing import Any, Dict, Optional


class JournalError(Exception):
    """Base exception for all FlowJournal errors."""

    status_code = 400
    code = "JOURNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationError(JournalError):
    """Malformed, missing or out-of-range input."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.field = field
        if field is not None:
            self.details.setdefault("field", field)


class ConflictError(JournalError):
    """Resource conflict errors."""

    status_code = 409
    code = "CONFLICT"


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that is already taken."""

    status_code = 400
    code = "USER_EXISTS"

    def __init__(self, message: str = "User already exists", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class AuthenticationError(JournalError):
    """Authentication related errors."""

    status_code = 401
    code = "AUTH_ERROR"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid credentials", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class EmailNotVerifiedError(AuthenticationError):
    code = "EMAIL_NOT_VERIFIED"

    def __init__(
        self,
        message: str = "Please verify your email before logging in",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid or expired token", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class AuthorizationError(JournalError):
    """Authenticated, but the role or account state does not allow it."""

    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class OnboardingRequiredError(AuthorizationError):
    code = "ONBOARDING_REQUIRED"

    def __init__(
        self,
        message: str = "Please complete onboarding first",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class NotFoundError(JournalError):
    """Resource absent, or not visible to the caller."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", **kwargs: Any) -> None:
        super().__init__(f"{resource} not found", **kwargs)
        self.resource = resource


class InvalidVerificationTokenError(JournalError):
    status_code = 400
    code = "INVALID_VERIFICATION_TOKEN"

    def __init__(
        self,
        message: str = "Invalid or expired verification token",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class VerificationTokenExpiredError(JournalError):
    status_code = 400
    code = "VERIFICATION_TOKEN_EXPIRED"

    def __init__(
        self,
        message: str = "Verification token has expired. Please request a new verification email.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class AlreadyVerifiedError(JournalError):
    status_code = 400
    code = "ALREADY_VERIFIED"

    def __init__(self, message: str = "Email is already verified", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SecurityError(JournalError):
    """Failures inside the security primitives themselves."""

    status_code = 500
    code = "SECURITY_ERROR"


class ExternalServiceError(JournalError):
    """External service integration errors."""

    status_code = 502
    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        service: str,
        message: str = "External service error",
        **kwargs: Any,
    ) -> None:
        super().__init__(f"{service}: {message}", **kwargs)
        self.service = service


class InternalError(JournalError):
    status_code = 500
    code = "INTERNAL_ERROR"
