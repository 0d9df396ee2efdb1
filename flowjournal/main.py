"""FastAPI application factory."""

from contextlib import asynccontextmanager
from datetime import timedelta
from functools import partial
from typing import AsyncGenerator, Optional

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .dependencies import get_database
from .domains.analytics.api.routers import router as analytics_router
from .domains.analytics.application.services import StatisticsService
from .domains.auth.api.routers import router as auth_router
from .domains.auth.application.services import AccountDirectory
from .domains.auth.domain.services import VerificationTokenManager
from .domains.trading.api.routers import router as trading_router
from .domains.trading.application.services import TradeLedger
from .infrastructure.config.settings import AppSettings, get_settings
from .infrastructure.logging.structured_logger import configure_logging
from .infrastructure.mail.mailer import VerificationMailer, build_mailer
from .infrastructure.oauth.google import GoogleOAuthClient
from .infrastructure.persistence.database import DatabaseManager
from .infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from .infrastructure.security.authentication import TokenIssuer
from .infrastructure.security.hashing import PasswordHasher
from .infrastructure.web.errors import register_error_handlers
from .infrastructure.web.middleware import register_request_logging
from .shared.utils.time import utcnow

logger = structlog.get_logger()


def create_app(
    settings: Optional[AppSettings] = None,
    mailer: Optional[VerificationMailer] = None,
    google_client: Optional[GoogleOAuthClient] = None,
) -> FastAPI:
    """Build the application.

    Collaborators passed in replace the ones built from settings, which is
    how tests swap in a recording mailer or a mocked Google transport.
    """
    settings = settings or get_settings()
    configure_logging(settings.logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting application", app=settings.app_name, environment=settings.environment)

        db = DatabaseManager(settings.database)
        if settings.database.create_tables:
            await db.create_tables()

        uow_factory = partial(SqlAlchemyUnitOfWork, db.session_factory)
        google = google_client or GoogleOAuthClient(settings.google)

        app.state.settings = settings
        app.state.db = db
        app.state.google = google
        app.state.accounts = AccountDirectory(
            uow_factory=uow_factory,
            hasher=PasswordHasher(settings.security),
            token_issuer=TokenIssuer(settings.security),
            verification_tokens=VerificationTokenManager(
                frontend_url=settings.frontend_url,
                ttl=timedelta(hours=settings.security.verification_token_ttl_hours),
            ),
            mailer=mailer or build_mailer(settings.mail),
            min_password_length=settings.security.min_password_length,
        )
        app.state.ledger = TradeLedger(uow_factory)
        app.state.statistics = StatisticsService(uow_factory)

        logger.info("Application startup complete")

        yield

        logger.info("Shutting down application")
        await google.aclose()
        await db.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="Trading journal backend",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_request_logging(app, settings.logging.correlation_id_header)
    register_error_handlers(app)

    app.include_router(auth_router)
    # before trading_router: /trades/stats must win over /trades/{trade_id}
    app.include_router(analytics_router)
    app.include_router(trading_router)

    @app.get("/health", tags=["system"])
    async def health_check(db: DatabaseManager = Depends(get_database)) -> dict:
        """Health check endpoint."""
        database_up = await db.ping()
        return {
            "status": "ok" if database_up else "degraded",
            "database": "up" if database_up else "down",
            "timestamp": utcnow().isoformat(),
        }

    return app
