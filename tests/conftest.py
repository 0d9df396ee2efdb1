"""
Shared fixtures.

Every test that touches the database gets its own SQLite file under
tmp_path, so tests never share state.
"""

from datetime import datetime, timedelta, timezone
from functools import partial
from typing import List, Tuple

import pytest

from flowjournal.domains.analytics.application.services import StatisticsService
from flowjournal.domains.auth.application.services import AccountDirectory
from flowjournal.domains.auth.domain.services import VerificationTokenManager
from flowjournal.domains.trading.application.services import TradeLedger
from flowjournal.infrastructure.config.settings import (
    AppSettings,
    DatabaseConfig,
    GoogleOAuthConfig,
    LoggingConfig,
    MailConfig,
    SecurityConfig,
)
from flowjournal.infrastructure.mail.mailer import VerificationMailer
from flowjournal.infrastructure.persistence.database import DatabaseManager
from flowjournal.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from flowjournal.infrastructure.security.authentication import TokenIssuer
from flowjournal.infrastructure.security.hashing import PasswordHasher
from flowjournal.shared.exceptions.base import ExternalServiceError

JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class RecordingMailer(VerificationMailer):
    """Keeps every verification link instead of sending it."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = False

    async def send_verification_email(self, email, first_name, link, ttl_hours=24):
        if self.fail:
            raise ExternalServiceError("smtp", "Failed to send email")
        self.sent.append((email, first_name, link))

    def last_token_for(self, email: str) -> str:
        links = [link for to, _, link in self.sent if to == email]
        assert links, f"no verification email sent to {email}"
        return links[-1].rsplit("token=", 1)[1]


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def security_config():
    return SecurityConfig(jwt_secret_key=JWT_SECRET, password_hash_rounds=4)


@pytest.fixture
def settings(tmp_path, security_config):
    return AppSettings(
        environment="testing",
        frontend_url="http://frontend.test",
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'journal.db'}"),
        security=security_config,
        logging=LoggingConfig(level="WARNING", format="console"),
        mail=MailConfig(host=None),
        google=GoogleOAuthConfig(client_id=None, client_secret=None),
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
async def database(settings):
    db = DatabaseManager(settings.database)
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def uow_factory(database):
    return partial(SqlAlchemyUnitOfWork, database.session_factory)


@pytest.fixture
def verification_tokens(settings, clock):
    return VerificationTokenManager(settings.frontend_url, clock=clock)


@pytest.fixture
def accounts(uow_factory, security_config, verification_tokens, mailer):
    return AccountDirectory(
        uow_factory=uow_factory,
        hasher=PasswordHasher(security_config),
        token_issuer=TokenIssuer(security_config),
        verification_tokens=verification_tokens,
        mailer=mailer,
    )


@pytest.fixture
def ledger(uow_factory):
    return TradeLedger(uow_factory)


@pytest.fixture
def statistics(uow_factory):
    return StatisticsService(uow_factory)
