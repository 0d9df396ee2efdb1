"""
Unit tests for password hashing and session tokens.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from flowjournal.infrastructure.config.settings import SecurityConfig
from flowjournal.infrastructure.security.authentication import TokenClaims, TokenIssuer
from flowjournal.infrastructure.security.hashing import PasswordHasher
from flowjournal.shared.exceptions.base import InvalidTokenError

SECRET = "unit-test-secret-key-that-is-long-enough"


@pytest.fixture
def config():
    return SecurityConfig(jwt_secret_key=SECRET, password_hash_rounds=4)


class TestPasswordHasher:

    @pytest.fixture
    def hasher(self, config):
        return PasswordHasher(config)

    def test_hash_is_not_plaintext_and_verifies(self, hasher):
        hashed = hasher.hash("longenough1")

        assert hashed != "longenough1"
        assert hashed.startswith("$2")
        assert hasher.verify("longenough1", hashed) is True

    def test_wrong_password_does_not_verify(self, hasher):
        hashed = hasher.hash("longenough1")

        assert hasher.verify("longenough2", hashed) is False

    def test_same_password_gets_different_salts(self, hasher):
        assert hasher.hash("same") != hasher.hash("same")

    def test_empty_password_can_be_hashed(self, hasher):
        """Length policy belongs to the caller."""
        hashed = hasher.hash("")

        assert hasher.verify("", hashed) is True

    @pytest.mark.parametrize("stored", ["", "not-a-bcrypt-hash"])
    def test_empty_or_malformed_hash_never_matches(self, hasher, stored):
        assert hasher.verify("anything", stored) is False

    def test_long_passwords_verify_consistently(self, hasher):
        password = "x" * 100
        hashed = hasher.hash(password)

        assert hasher.verify(password, hashed) is True


class TestTokenIssuer:

    def test_round_trip_claims(self, config):
        issuer = TokenIssuer(config)
        user_id = uuid4()

        token = issuer.issue(TokenClaims(user_id=user_id, email="a@x.com", role="trader"))
        claims = issuer.verify(token)

        assert claims == TokenClaims(user_id=user_id, email="a@x.com", role="trader")

    def test_expired_token_is_invalid(self, config):
        long_ago = datetime.now(timezone.utc) - timedelta(days=30)
        issuer = TokenIssuer(config, clock=lambda: long_ago)
        token = issuer.issue(TokenClaims(user_id=uuid4()))

        with pytest.raises(InvalidTokenError):
            TokenIssuer(config).verify(token)

    def test_tampered_token_is_invalid(self, config):
        issuer = TokenIssuer(config)
        token = issuer.issue(TokenClaims(user_id=uuid4()))
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(InvalidTokenError):
            issuer.verify(tampered)

    def test_token_signed_with_other_secret_is_invalid(self, config):
        foreign = jwt.encode(
            {"sub": str(uuid4()), "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret-that-is-also-long-enough",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            TokenIssuer(config).verify(foreign)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token_is_invalid(self, config, token):
        with pytest.raises(InvalidTokenError):
            TokenIssuer(config).verify(token)

    def test_non_uuid_subject_is_invalid(self, config):
        token = jwt.encode(
            {"sub": "not-a-uuid", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            TokenIssuer(config).verify(token)

    def test_all_failures_share_one_message(self, config):
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenIssuer(config).verify("garbage")

        assert exc_info.value.message == "Invalid or expired token"
        assert exc_info.value.status_code == 401


class TestSecurityConfig:

    def test_short_secret_is_rejected(self):
        with pytest.raises(ValueError):
            SecurityConfig(jwt_secret_key="short")
