"""Password hashing and JWT tokens for signing users in."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

from worksheet_studio.config import settings

ph = PasswordHasher()

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return ph.verify(hashed_password, plain_password)
    except VerifyMismatchError:
        return False


def _create_token(user_id: UUID, token_type: str, lifetime: timedelta, **claims: Any) -> str:
    issued_at = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "exp": issued_at + lifetime,
        "iat": issued_at,
        "type": token_type,
        **claims,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    user_id: UUID,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    """Create a short-lived JWT access token."""
    return _create_token(
        user_id,
        ACCESS_TOKEN_TYPE,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        **(additional_claims or {}),
    )


def create_refresh_token(user_id: UUID) -> str:
    """Create a JWT refresh token."""
    return _create_token(
        user_id,
        REFRESH_TOKEN_TYPE,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        jti=uuid4().hex,
    )


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise ValueError(f"Invalid token: {e}")


def _verify_token_type(token: str, expected: str) -> dict[str, Any]:
    payload = decode_token(token)
    if payload.get("type") != expected:
        raise ValueError("Invalid token type")
    return payload


def verify_access_token(token: str) -> dict[str, Any]:
    """Verify an access token and return its payload."""
    return _verify_token_type(token, ACCESS_TOKEN_TYPE)


def verify_refresh_token(token: str) -> dict[str, Any]:
    """Verify a refresh token and return its payload."""
    return _verify_token_type(token, REFRESH_TOKEN_TYPE)
