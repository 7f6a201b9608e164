"""
Tests for password hashing and access tokens.
"""

import uuid
from datetime import timedelta

import jwt
import pytest

from adopt_core.exceptions import AuthenticationException
from adopt_core.models import User, UserRole
from adopt_core.services.auth import (
    create_access_token,
    decode_access_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from adopt_core.utils.datetime_utils import get_current_utc


def _user(**kwargs) -> User:
    defaults = {
        "id": uuid.uuid4(),
        "username": "tokenuser",
        "email": "token@example.com",
        "password_hash": "x",
        "role": UserRole.RESCUE,
    }
    defaults.update(kwargs)
    return User(**defaults)


class TestPasswordHashing:
    """Test bcrypt hashing helpers."""

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret-pass", rounds=4)

        assert hashed != "s3cret-pass"
        assert hashed.startswith("$2")
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_empty_inputs_never_verify(self):
        hashed = hash_password("s3cret-pass", rounds=4)

        assert not verify_password("", hashed)
        assert not verify_password("s3cret-pass", None)

    def test_malformed_hash(self):
        assert not verify_password("s3cret-pass", "not-a-bcrypt-hash")

    def test_reset_tokens_are_unique(self):
        assert generate_reset_token() != generate_reset_token()


class TestAccessTokens:
    """Test JWT issue and verification."""

    def test_round_trip_claims(self, settings):
        user = _user()

        claims = decode_access_token(create_access_token(user, settings), settings)

        assert claims.user_id == user.id
        assert claims.role == UserRole.RESCUE

    def test_wrong_secret(self, settings):
        token = jwt.encode({"sub": str(uuid.uuid4()), "exp": get_current_utc() + timedelta(hours=1)},
                           "other-secret", algorithm="HS256")

        with pytest.raises(AuthenticationException) as exc_info:
            decode_access_token(token, settings)
        assert exc_info.value.message == "Invalid token"

    def test_expired(self, settings):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "exp": get_current_utc() - timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )

        with pytest.raises(AuthenticationException) as exc_info:
            decode_access_token(token, settings)
        assert exc_info.value.message == "Token has expired"

    @pytest.mark.parametrize(
        "payload",
        [
            {"role": "user"},
            {"sub": "not-a-uuid"},
            {"sub": "00000000-0000-0000-0000-000000000001", "role": "superuser"},
        ],
    )
    def test_bad_claims(self, settings, payload):
        payload = {**payload, "exp": get_current_utc() + timedelta(hours=1)}
        token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(AuthenticationException):
            decode_access_token(token, settings)

    def test_garbage(self, settings):
        with pytest.raises(AuthenticationException):
            decode_access_token("not.a.token", settings)
