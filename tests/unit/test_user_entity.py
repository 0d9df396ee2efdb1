"""
Unit tests for the User aggregate state machine.
"""

from datetime import datetime, timedelta, timezone

import pytest

from flowjournal.domains.auth.domain.entities import User
from flowjournal.domains.auth.domain.value_objects import UserRole, normalize_email
from flowjournal.shared.exceptions.base import ValidationError

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def registered_user() -> User:
    return User.register(
        email="Trader@Example.com",
        password_hash="$2b$04$hash",
        first_name="Ada",
        last_name="Lovelace",
    )


class TestRegistration:

    def test_starts_unverified_and_cannot_log_in(self):
        user = registered_user()

        assert user.email == "trader@example.com"
        assert user.role == UserRole.TRADER
        assert user.email_verified is False
        assert user.can_login is False
        assert user.needs_onboarding is False

    def test_verification_clears_token(self):
        user = registered_user()
        user.issue_verification_token("abc", NOW + timedelta(hours=24))

        user.verify_email("digest")

        assert user.email_verified is True
        assert user.can_login is True
        assert user.verification_token is None
        assert user.verification_token_expires_at is None
        assert user.consumed_token_digest == "digest"

    def test_reissuing_replaces_previous_token(self):
        user = registered_user()
        user.issue_verification_token("first", NOW)
        user.issue_verification_token("second", NOW + timedelta(hours=1))

        assert user.verification_token == "second"
        assert user.verification_token_expires_at == NOW + timedelta(hours=1)


class TestVerificationExpiry:

    def test_valid_at_exact_expiry(self):
        user = registered_user()
        user.issue_verification_token("abc", NOW)

        assert user.is_verification_expired(NOW) is False

    def test_expired_one_millisecond_later(self):
        user = registered_user()
        user.issue_verification_token("abc", NOW)

        assert user.is_verification_expired(NOW + timedelta(milliseconds=1)) is True


class TestFederatedIdentity:

    def test_federated_user_is_verified_but_needs_onboarding(self):
        user = User.from_external_identity("google-123", "new@example.com", "Grace", None)

        assert user.email_verified is True
        assert user.is_federated_only is True
        assert user.needs_onboarding is True
        assert user.password_hash is None
        assert user.last_name == ""

    def test_missing_given_name_defaults(self):
        user = User.from_external_identity("google-123", "new@example.com")

        assert user.first_name == "User"

    def test_linking_only_when_absent(self):
        user = registered_user()

        assert user.link_external_identity("google-1") is True
        assert user.link_external_identity("google-2") is False
        assert user.external_id == "google-1"

    def test_complete_onboarding_sets_password_and_names(self):
        user = User.from_external_identity("google-123", "new@example.com", "Grace", "Hopper")

        user.complete_onboarding("$2b$04$hash", first_name="G.", last_name=None)

        assert user.onboarding_completed is True
        assert user.is_federated_only is False
        assert user.first_name == "G."
        assert user.last_name == "Hopper"

    def test_complete_onboarding_requires_hash(self):
        user = User.from_external_identity("google-123", "new@example.com")

        with pytest.raises(ValidationError):
            user.complete_onboarding("")


class TestNormalizeEmail:

    def test_lowercases_and_strips(self):
        assert normalize_email("  Mixed@Case.COM ") == "mixed@case.com"

    @pytest.mark.parametrize("value", ["", "   ", "no-at-sign"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValidationError):
            normalize_email(value)
