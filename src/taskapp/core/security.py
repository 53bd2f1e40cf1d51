"""Security utilities for password hashing and auth token signing."""

import secrets
from datetime import UTC, datetime, timedelta

import jwt
from passlib.context import CryptContext

from taskapp.config import Settings

# SHA-256 before bcrypt so passwords past bcrypt's 72-byte input limit still
# count in full; plain bcrypt hashes keep verifying
pwd_context = CryptContext(schemes=["bcrypt_sha256", "bcrypt"], deprecated="auto")


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


def hash_password(password: str) -> str:
    """Hash a password of any length."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_auth_token(user_id: int, settings: Settings) -> str:
    """
    Sign a bearer token bound to a user.

    The token carries the user id as ``sub`` and a random ``jti`` so that two
    logins within the same second still produce distinct tokens. ``exp`` is
    only set when ``token_expire_minutes`` is configured.

    Args:
        user_id: Owning user's id
        settings: Application settings

    Returns:
        Encoded JWT
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "jti": secrets.token_urlsafe(16),
    }
    if settings.token_expire_minutes is not None:
        payload["exp"] = now + timedelta(minutes=settings.token_expire_minutes)

    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_auth_token(token: str, settings: Settings) -> int:
    """
    Verify a bearer token's signature and return the embedded user id.

    Args:
        token: Encoded JWT
        settings: Application settings

    Returns:
        User id from the ``sub`` claim

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["sub"]},
        )
        return int(payload["sub"])
    except (jwt.PyJWTError, ValueError) as e:
        raise InvalidTokenError(str(e)) from e
