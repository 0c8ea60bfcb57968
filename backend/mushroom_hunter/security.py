"""
Mushroom Hunter Backend — Password Hashing & Access Tokens
===========================================================

What:  bcrypt password hashing and HS256 JWT access tokens.
Who:   AuthService (register/login) and the `get_current_user` dependency.

Token claims:
    sub  → user id (string UUID)
    iat  → issued-at (UTC)
    exp  → expiry, `jwt_expires_minutes` after issue
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from mushroom_hunter.config import settings
from mushroom_hunter.exceptions import AuthenticationError

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def create_access_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.jwt_expires_minutes))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        AuthenticationError(code="token_expired"): signature valid but expired
        AuthenticationError(code="invalid_token"): anything else wrong
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Token expired", code="token_expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid authentication token", code="invalid_token")

    try:
        return uuid.UUID(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError(message="Invalid authentication token", code="invalid_token")
