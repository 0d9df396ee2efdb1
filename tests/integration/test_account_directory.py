"""
Integration tests for the account lifecycle against SQLite.
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from flowjournal.domains.auth.application.commands import CompleteOnboardingCommand, RegisterUserCommand
from flowjournal.domains.auth.domain.value_objects import UserRole
from flowjournal.domains.auth.infrastructure.models import UserSettingsModel
from flowjournal.domains.trading.domain.value_objects import TradeDraft
from flowjournal.infrastructure.oauth.google import ExternalIdentity
from flowjournal.shared.exceptions.base import (
    AlreadyVerifiedError,
    EmailNotVerifiedError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidVerificationTokenError,
    NotFoundError,
    UserAlreadyExistsError,
    ValidationError,
    VerificationTokenExpiredError,
)

pytestmark = pytest.mark.integration

PASSWORD = "longenough1"


def register_command(email="a@x.com", **overrides) -> RegisterUserCommand:
    data = {
        "email": email,
        "password": PASSWORD,
        "first_name": "Ada",
        "last_name": "Lovelace",
    }
    data.update(overrides)
    return RegisterUserCommand(**data)


async def count_settings(database, user_id) -> int:
    async with database.session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(UserSettingsModel).where(UserSettingsModel.user_id == user_id)
        )
        return result.scalar_one()


class TestRegister:

    async def test_creates_unverified_user_and_sends_link(self, accounts, mailer, database):
        user = await accounts.register(register_command())

        assert user.email_verified is False
        assert user.role == UserRole.TRADER
        assert user.verification_token is not None
        assert len(mailer.sent) == 1
        email, first_name, link = mailer.sent[0]
        assert email == "a@x.com"
        assert first_name == "Ada"
        assert link == f"http://frontend.test/verify-email?token={user.verification_token}"
        assert await count_settings(database, user.id) == 1

    async def test_token_expires_after_24_hours(self, accounts, clock):
        user = await accounts.register(register_command())

        assert user.verification_token_expires_at == clock.now + timedelta(hours=24)

    async def test_duplicate_email_is_case_insensitive(self, accounts):
        await accounts.register(register_command("a@x.com"))

        with pytest.raises(UserAlreadyExistsError) as exc_info:
            await accounts.register(register_command("A@X.COM"))

        assert exc_info.value.message == "User already exists"
        assert exc_info.value.status_code == 400

    async def test_email_failure_does_not_fail_registration(self, accounts, mailer):
        mailer.fail = True

        user = await accounts.register(register_command())

        fetched = await accounts.get_user(user.id)
        assert fetched.email == "a@x.com"


class TestLogin:

    async def test_unknown_email(self, accounts):
        with pytest.raises(InvalidCredentialsError):
            await accounts.login("nobody@x.com", PASSWORD)

    async def test_wrong_password(self, accounts, mailer):
        user = await accounts.register(register_command())
        await accounts.verify_email(mailer.last_token_for(user.email))

        with pytest.raises(InvalidCredentialsError):
            await accounts.login("a@x.com", "wrong-password")

    async def test_unverified_is_reported_distinctly(self, accounts):
        await accounts.register(register_command())

        with pytest.raises(EmailNotVerifiedError) as exc_info:
            await accounts.login("a@x.com", PASSWORD)

        assert exc_info.value.status_code == 401

    async def test_verified_user_gets_a_session_token(self, accounts, mailer):
        user = await accounts.register(register_command())
        await accounts.verify_email(mailer.last_token_for(user.email))

        logged_in, token = await accounts.login("A@x.com", PASSWORD)

        assert logged_in.id == user.id
        assert (await accounts.authenticate(token)).id == user.id


class TestVerification:

    async def test_consuming_clears_token(self, accounts, mailer):
        user = await accounts.register(register_command())
        token = mailer.last_token_for(user.email)

        result = await accounts.verify_email(token)

        assert result.already_verified is False
        assert result.user.email_verified is True
        assert result.user.verification_token is None
        assert result.user.verification_token_expires_at is None
        assert result.token

    async def test_second_consume_succeeds_idempotently(self, accounts, mailer):
        """WHEN a stale verification link is clicked again after success
        THEN it succeeds again without sending anything new
        """
        user = await accounts.register(register_command())
        token = mailer.last_token_for(user.email)
        await accounts.verify_email(token)

        again = await accounts.verify_email(token)

        assert again.already_verified is True
        assert again.user.id == user.id
        assert len(mailer.sent) == 1

    async def test_unknown_token(self, accounts):
        with pytest.raises(InvalidVerificationTokenError):
            await accounts.verify_email("does-not-exist")

    async def test_valid_at_exact_expiry(self, accounts, mailer, clock):
        user = await accounts.register(register_command())
        clock.advance(timedelta(hours=24))

        result = await accounts.verify_email(mailer.last_token_for(user.email))

        assert result.user.email_verified is True

    async def test_expired_one_millisecond_after(self, accounts, mailer, clock):
        user = await accounts.register(register_command())
        token = mailer.last_token_for(user.email)
        clock.advance(timedelta(hours=24, milliseconds=1))

        with pytest.raises(VerificationTokenExpiredError):
            await accounts.verify_email(token)

        # the expired token is kept until a resend replaces it
        stored = await accounts.get_user(user.id)
        assert stored.verification_token == token
        assert stored.email_verified is False

    async def test_resend_replaces_token(self, accounts, mailer, clock):
        user = await accounts.register(register_command())
        old_token = mailer.last_token_for(user.email)
        clock.advance(timedelta(hours=30))

        await accounts.resend_verification("a@x.com")
        new_token = mailer.last_token_for(user.email)

        assert new_token != old_token
        with pytest.raises(InvalidVerificationTokenError):
            await accounts.verify_email(old_token)
        assert (await accounts.verify_email(new_token)).user.email_verified is True

    async def test_resend_unknown_email(self, accounts):
        with pytest.raises(NotFoundError):
            await accounts.resend_verification("nobody@x.com")

    async def test_resend_when_already_verified(self, accounts, mailer):
        user = await accounts.register(register_command())
        await accounts.verify_email(mailer.last_token_for(user.email))

        with pytest.raises(AlreadyVerifiedError):
            await accounts.resend_verification("a@x.com")

    async def test_resend_email_failure_is_an_error(self, accounts, mailer):
        await accounts.register(register_command())
        mailer.fail = True

        with pytest.raises(InternalError):
            await accounts.resend_verification("a@x.com")


class TestExternalIdentity:

    async def test_creates_verified_user_needing_onboarding(self, accounts, database):
        identity = ExternalIdentity("google-1", "New@Example.com", "Grace", "Hopper")

        user = await accounts.login_or_create_via_identity(identity)

        assert user.email == "new@example.com"
        assert user.email_verified is True
        assert user.password_hash is None
        assert user.needs_onboarding is True
        assert await count_settings(database, user.id) == 1

    async def test_links_existing_email_account(self, accounts):
        existing = await accounts.register(register_command())

        user = await accounts.login_or_create_via_identity(ExternalIdentity("google-1", "a@x.com"))

        assert user.id == existing.id
        assert user.external_id == "google-1"
        assert (await accounts.get_user(existing.id)).external_id == "google-1"

    async def test_existing_link_is_not_overwritten(self, accounts):
        first = await accounts.login_or_create_via_identity(ExternalIdentity("google-1", "g@x.com"))

        again = await accounts.login_or_create_via_identity(ExternalIdentity("google-1", "g@x.com"))

        assert again.id == first.id
        assert again.external_id == "google-1"

    async def test_federated_user_cannot_password_login(self, accounts):
        await accounts.login_or_create_via_identity(ExternalIdentity("google-1", "g@x.com"))

        with pytest.raises(InvalidCredentialsError):
            await accounts.login("g@x.com", "")


class TestOnboarding:

    async def test_sets_password_and_completes(self, accounts):
        user = await accounts.login_or_create_via_identity(ExternalIdentity("google-1", "g@x.com", "Grace"))

        done = await accounts.complete_onboarding(
            CompleteOnboardingCommand(user_id=user.id, password=PASSWORD, last_name="Hopper")
        )

        assert done.onboarding_completed is True
        assert done.last_name == "Hopper"
        logged_in, _ = await accounts.login("g@x.com", PASSWORD)
        assert logged_in.id == user.id

    async def test_short_password_is_rejected(self, accounts):
        user = await accounts.login_or_create_via_identity(ExternalIdentity("google-1", "g@x.com"))

        with pytest.raises(ValidationError):
            await accounts.complete_onboarding(CompleteOnboardingCommand(user_id=user.id, password="short"))

        assert (await accounts.get_user(user.id)).needs_onboarding is True


class TestDeleteAccount:

    async def test_removes_user_settings_and_trades(self, accounts, ledger, mailer, database):
        user = await accounts.register(register_command())
        await ledger.create(user, TradeDraft.model_validate({
            "symbol": "AAPL",
            "type": "stock",
            "direction": "long",
            "entryPrice": "100",
            "quantity": "1",
            "entryDate": "2024-01-02T10:00:00Z",
        }))
        token = accounts.session_token_for(user)

        await accounts.delete_account(user.id)

        with pytest.raises(NotFoundError):
            await accounts.get_user(user.id)
        assert await count_settings(database, user.id) == 0
        page = await ledger.list(user)
        assert page.trades == []
        with pytest.raises(InvalidTokenError):
            await accounts.authenticate(token)

    async def test_unknown_user(self, accounts):
        with pytest.raises(NotFoundError):
            await accounts.delete_account(uuid4())
