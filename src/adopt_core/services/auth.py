"""
Password hashing and bearer token utilities.

Passwords and reset tokens are hashed with bcrypt; access tokens are
HS256 JWTs carrying ``sub`` (user id), ``role`` and ``exp``.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import bcrypt
import jwt

from ..exceptions import AuthenticationException
from ..models.user import User, UserRole
from ..utils.config import AppSettings
from ..utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password (or reset token) with bcrypt."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def generate_reset_token() -> str:
    """Generate a random URL-safe password reset token."""
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class TokenClaims:
    """Decoded access token claims."""

    user_id: uuid.UUID
    role: UserRole


def create_access_token(user: User, settings: AppSettings) -> str:
    """Issue an access token for a user."""
    expires = get_current_utc() + timedelta(hours=settings.jwt_expiration_hours)
    payload = {
        "sub": str(user.id),
        "role": UserRole(user.role).value,
        "exp": expires,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: AppSettings) -> TokenClaims:
    """
    Decode and verify an access token.

    Raises:
        AuthenticationException: If the token is expired, tampered or malformed
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationException("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationException("Invalid token")

    try:
        return TokenClaims(
            user_id=uuid.UUID(payload["sub"]),
            role=UserRole(payload.get("role", UserRole.USER.value)),
        )
    except ValueError:
        raise AuthenticationException("Invalid token")
