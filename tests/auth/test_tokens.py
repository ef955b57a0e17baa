"""Tests for TokenManager - issue, verify, revoke."""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from auth.exceptions import InvalidTokenError, TokenExpiredError, TokenRevokedError
from auth.types import Role, TokenClaims, UserProfile
from utils.timezone import now_utc, to_epoch


@pytest.fixture
def user():
    return UserProfile(id=uuid4(), name="Owner", email="owner@example.com", role=Role.OWNER)


def _forge(config, **payload) -> str:
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


class TestIssue:
    def test_claims_carry_identity_and_role(self, token_manager, user, config):
        claims = token_manager.decode(token_manager.issue(user))

        assert claims.user_id == user.id
        assert claims.role == Role.OWNER
        assert claims.exp - claims.iat == timedelta(minutes=config.token_expiry_minutes)

    def test_each_token_has_unique_jti(self, token_manager, user):
        first = token_manager.decode(token_manager.issue(user))
        second = token_manager.decode(token_manager.issue(user))

        assert first.jti != second.jti


class TestDecode:
    def test_expired_token(self, token_manager, config, user):
        past = now_utc() - timedelta(hours=2)
        token = _forge(
            config,
            sub=str(user.id),
            role="OWNER",
            jti="old",
            iat=to_epoch(past),
            exp=to_epoch(past + timedelta(minutes=30)),
        )

        with pytest.raises(TokenExpiredError):
            token_manager.decode(token)

    def test_wrong_secret(self, token_manager, user):
        now = now_utc()
        token = jwt.encode(
            {
                "sub": str(user.id),
                "role": "ADMIN",
                "jti": "forged",
                "iat": to_epoch(now),
                "exp": to_epoch(now + timedelta(minutes=5)),
            },
            "a-different-secret-of-sufficient-length",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            token_manager.decode(token)

    def test_missing_claim(self, token_manager, config, user):
        now = now_utc()
        token = _forge(config, sub=str(user.id), iat=to_epoch(now), exp=to_epoch(now + timedelta(minutes=5)))

        with pytest.raises(InvalidTokenError):
            token_manager.decode(token)

    def test_unknown_role(self, token_manager, config, user):
        now = now_utc()
        token = _forge(
            config,
            sub=str(user.id),
            role="SUPERUSER",
            jti="x",
            iat=to_epoch(now),
            exp=to_epoch(now + timedelta(minutes=5)),
        )

        with pytest.raises(InvalidTokenError, match="claims"):
            token_manager.decode(token)

    def test_garbage(self, token_manager):
        with pytest.raises(InvalidTokenError):
            token_manager.decode("not.a.jwt")


class TestRevoke:
    def test_revoked_token_rejected(self, token_manager, user):
        token = token_manager.issue(user)
        claims = token_manager.decode(token)

        assert token_manager.revoke(claims) is True

        with pytest.raises(TokenRevokedError):
            token_manager.decode(token)

    def test_revocation_expires_with_token(self, token_manager, valkey, user, config):
        claims = token_manager.decode(token_manager.issue(user))

        token_manager.revoke(claims)

        ttl = valkey.ttl(f"{token_manager.KEY_PREFIX}{claims.jti}")
        assert 0 < ttl <= config.token_expiry_minutes * 60

    def test_already_expired_claims_not_stored(self, token_manager, valkey, user):
        past = now_utc() - timedelta(hours=1)
        claims = TokenClaims(sub=user.id, role=user.role, jti="gone", iat=past, exp=past)

        assert token_manager.revoke(claims) is False
        assert not valkey.exists(f"{token_manager.KEY_PREFIX}gone")

    def test_is_revoked(self, token_manager, user):
        claims = token_manager.decode(token_manager.issue(user))

        assert token_manager.is_revoked(claims.jti) is False
        token_manager.revoke(claims)
        assert token_manager.is_revoked(claims.jti) is True
