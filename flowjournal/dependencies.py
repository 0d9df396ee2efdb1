"""FastAPI dependency providers.

Everything is read from ``app.state``, which the lifespan populates.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .domains.analytics.application.services import StatisticsService
from .domains.auth.application.services import AccountDirectory
from .domains.auth.domain.entities import User
from .domains.trading.application.services import TradeLedger
from .infrastructure.config.settings import AppSettings
from .infrastructure.oauth.google import GoogleOAuthClient
from .infrastructure.persistence.database import DatabaseManager
from .shared.exceptions.base import AuthenticationError, OnboardingRequiredError

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_database(request: Request) -> DatabaseManager:
    return request.app.state.db


def get_account_directory(request: Request) -> AccountDirectory:
    return request.app.state.accounts


def get_trade_ledger(request: Request) -> TradeLedger:
    return request.app.state.ledger


def get_statistics_service(request: Request) -> StatisticsService:
    return request.app.state.statistics


def get_google_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.google


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> User:
    """Resolve the bearer token to the user as currently stored."""
    if credentials is None:
        raise AuthenticationError("Authentication required", code="AUTH_REQUIRED")
    return await accounts.authenticate(credentials.credentials)


async def get_onboarded_user(user: User = Depends(get_current_user)) -> User:
    """Onboarding gate for the main application."""
    if user.needs_onboarding:
        raise OnboardingRequiredError()
    return user
