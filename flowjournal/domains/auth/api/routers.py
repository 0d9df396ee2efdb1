"""Auth API routers."""

import secrets
from typing import Optional
from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from ....dependencies import (
    get_account_directory,
    get_app_settings,
    get_current_user,
    get_google_client,
)
from ....infrastructure.config.settings import AppSettings
from ....infrastructure.oauth.google import GoogleOAuthClient
from ....shared.exceptions.base import ExternalServiceError, JournalError
from ..application.commands import CompleteOnboardingCommand, RegisterUserCommand
from ..application.services import AccountDirectory
from ..domain.entities import User
from .schemas import (
    CompleteOnboardingRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    RegisterUserRequest,
    ResendVerificationRequest,
    UserEnvelope,
    UserResponse,
    VerifyEmailResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["authentication"])

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 600


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request: RegisterUserRequest,
    accounts: AccountDirectory = Depends(get_account_directory),
) -> RegisterResponse:
    """Register a new account. The caller must verify the email before logging in."""
    user = await accounts.register(RegisterUserCommand(**request.model_dump()))
    return RegisterResponse(
        message="Registration successful. Please check your email to verify your account.",
        user=UserResponse.from_user(user),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    accounts: AccountDirectory = Depends(get_account_directory),
) -> LoginResponse:
    user, token = await accounts.login(request.email, request.password)
    return LoginResponse(user=UserResponse.from_user(user), token=token)


@router.get("/verify/{token}", response_model=VerifyEmailResponse)
async def verify_email(
    token: str,
    accounts: AccountDirectory = Depends(get_account_directory),
) -> VerifyEmailResponse:
    """Consume a verification token. Repeating it after success is not an error."""
    result = await accounts.verify_email(token)
    message = "Email already verified" if result.already_verified else "Email verified successfully"
    return VerifyEmailResponse(
        verified=True,
        already_verified=result.already_verified,
        message=message,
        token=result.token,
        user=UserResponse.from_user(result.user),
    )


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    request: ResendVerificationRequest,
    accounts: AccountDirectory = Depends(get_account_directory),
) -> MessageResponse:
    await accounts.resend_verification(request.email)
    return MessageResponse(message="Verification email sent")


@router.get("/me", response_model=UserEnvelope)
async def get_me(user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.from_user(user))


@router.post("/complete-onboarding", response_model=UserEnvelope)
async def complete_onboarding(
    request: CompleteOnboardingRequest,
    user: User = Depends(get_current_user),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> UserEnvelope:
    updated = await accounts.complete_onboarding(
        CompleteOnboardingCommand(
            user_id=user.id,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    )
    return UserEnvelope(user=UserResponse.from_user(updated))


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(
    user: User = Depends(get_current_user),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> MessageResponse:
    """Irreversibly delete the caller's account, trades and settings."""
    await accounts.delete_account(user.id)
    return MessageResponse(message="Account deleted successfully")


@router.get("/google")
async def google_login(
    settings: AppSettings = Depends(get_app_settings),
    google: GoogleOAuthClient = Depends(get_google_client),
) -> RedirectResponse:
    if not google.enabled:
        return _frontend_redirect(settings, "/login", error="oauth_unavailable")

    state = secrets.token_urlsafe(24)
    response = RedirectResponse(google.authorization_url(state), status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    settings: AppSettings = Depends(get_app_settings),
    google: GoogleOAuthClient = Depends(get_google_client),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> RedirectResponse:
    """Finish the Google flow and hand a session token to the web client."""
    if not google.enabled:
        return _frontend_redirect(settings, "/login", error="oauth_unavailable")
    if error:
        logger.info("Google sign-in declined", reason=error)
        return _frontend_redirect(settings, "/login", error="oauth_denied")
    if not code:
        return _frontend_redirect(settings, "/login", error="missing_code")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google callback state mismatch")
        return _frontend_redirect(settings, "/login", error="invalid_state")

    try:
        identity = await google.fetch_identity(code)
    except ExternalServiceError:
        return _frontend_redirect(settings, "/login", error="oauth_failed")

    try:
        user = await accounts.login_or_create_via_identity(identity)
    except (JournalError, SQLAlchemyError) as e:
        logger.warning("Google sign-in could not be completed", error=str(e))
        return _frontend_redirect(settings, "/login", error="oauth_failed")

    response = _frontend_redirect(
        settings,
        "/auth/callback",
        token=accounts.session_token_for(user),
        onboarding="required" if user.needs_onboarding else "complete",
    )
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


def _frontend_redirect(settings: AppSettings, path: str, **params: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.frontend_url}{path}?{urlencode(params)}",
        status_code=status.HTTP_302_FOUND,
    )
