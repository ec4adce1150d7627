"""Settings validation, password hashing and token helpers."""

from datetime import timedelta

import jwt
import pytest
from argon2 import PasswordHasher
from pydantic import ValidationError

from quizhub.core.config import DEFAULT_DATABASE_URL, Settings, settings
from quizhub.core.errors import ERROR_KINDS, KIND_STATUS, error_kind, status_for_error
from quizhub.core.security import (
    create_access_token,
    hash_password,
    password_needs_rehash,
    verify_access_token,
    verify_password,
)


class TestSettings:
    def test_test_environment_is_active(self):
        assert settings.ENV == "test"

    def test_cors_origins_are_split(self):
        config = Settings(CORS_ORIGINS="http://a.example.com, http://b.example.com,")
        assert config.cors_origin_list == ["http://a.example.com", "http://b.example.com"]

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="LOUD")

    def test_prod_requires_database_url_and_secret(self):
        with pytest.raises(ValidationError):
            Settings(ENV="prod", DATABASE_URL=DEFAULT_DATABASE_URL, JWT_SECRET="x" * 40)
        with pytest.raises(ValidationError):
            Settings(ENV="prod", DATABASE_URL="postgresql://db/quizhub", JWT_SECRET="short")

        config = Settings(ENV="prod", DATABASE_URL="postgresql://db/quizhub", JWT_SECRET="x" * 40)
        assert config.jwt_secret == "x" * 40


class TestPasswords:
    def test_hash_and_verify(self):
        password_hash = hash_password("secret123")
        assert password_hash != "secret123"
        assert verify_password("secret123", password_hash)
        assert not verify_password("secret124", password_hash)

    def test_malformed_hash_does_not_verify(self):
        assert not verify_password("secret123", "not-a-hash")

    def test_weak_hash_needs_rehash(self):
        weak = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1).hash("secret123")
        assert verify_password("secret123", weak)
        assert password_needs_rehash(weak)
        assert not password_needs_rehash(hash_password("secret123"))


class TestAccessTokens:
    def test_round_trip(self):
        token = create_access_token("0" * 24)
        assert verify_access_token(token)["sub"] == "0" * 24

    def test_tampered_token(self):
        header, payload, _ = create_access_token("0" * 24).split(".")
        signature = create_access_token("f" * 24).split(".")[2]
        with pytest.raises(jwt.InvalidTokenError):
            verify_access_token(f"{header}.{payload}.{signature}")

    def test_expired_token(self):
        token = create_access_token("0" * 24, expires_delta=timedelta(seconds=-5))
        with pytest.raises(jwt.InvalidTokenError):
            verify_access_token(token)

    def test_token_without_subject(self):
        token = jwt.encode({"exp": 9999999999, "type": "access"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            verify_access_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "0" * 24, "type": "access"}, "another-secret", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            verify_access_token(token)


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "name, status",
        [
            ("ValidatorError", 400),
            ("ExamQuestionAnswerTypeError", 400),
            ("AuthorizationRequiredError", 401),
            ("AuthorizationFailedError", 403),
            ("UserWrongCredentialsError", 403),
            ("ExamQuestionNumberNotFoundError", 404),
            ("CategoryRatedAlreadyError", 409),
            ("KeyError", 500),
        ],
    )
    def test_status_for_error(self, name, status):
        assert status_for_error(name) == status

    def test_every_kind_has_a_status(self):
        assert set(ERROR_KINDS.values()) <= set(KIND_STATUS)
        assert error_kind("SomethingElse") == "InternalServerError"
