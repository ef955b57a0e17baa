"""Tests for AuthConfig validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from auth.config import AuthConfig

SECRET = "s" * 32


class TestDefaults:
    def test_defaults(self):
        config = AuthConfig(jwt_secret=SECRET)

        assert config.jwt_algorithm == "HS256"
        assert config.token_expiry_minutes == 60
        assert config.password_min_length == 8
        assert config.password_require_character_classes is True
        assert config.rate_limit_attempts == 5
        assert config.rate_limit_window_minutes == 15
        assert config.upload_dir == Path("uploads")
        assert config.app_name == "RentWise"

    def test_secret_required(self):
        with pytest.raises(ValidationError):
            AuthConfig()


class TestBounds:
    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(jwt_secret="too-short")

    @pytest.mark.parametrize("algorithm", ["RS256", "none", "HS1024"])
    def test_only_hmac_algorithms(self, algorithm):
        with pytest.raises(ValidationError):
            AuthConfig(jwt_secret=SECRET, jwt_algorithm=algorithm)

    def test_hs512_allowed(self):
        assert AuthConfig(jwt_secret=SECRET, jwt_algorithm="HS512").jwt_algorithm == "HS512"

    @pytest.mark.parametrize("minutes", [4, 1441])
    def test_token_expiry_bounds(self, minutes):
        with pytest.raises(ValidationError):
            AuthConfig(jwt_secret=SECRET, token_expiry_minutes=minutes)

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(ValidationError):
            AuthConfig(jwt_secret=SECRET, bcrypt_rounds=3)

    def test_rate_limit_attempts_bounds(self):
        with pytest.raises(ValidationError):
            AuthConfig(jwt_secret=SECRET, rate_limit_attempts=0)

    def test_max_document_bytes_floor(self):
        with pytest.raises(ValidationError):
            AuthConfig(jwt_secret=SECRET, max_document_bytes=10)
