"""Password hashing and bearer token handling.

Tokens are HS256 JWTs carrying the user id (``sub``), a per-login session id
(``jti``) and an expiry. A token is only honoured while its ``jti`` matches
the ``token_id`` stored on the user, so every new login revokes the previous
token and logout revokes the current one.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

import bcrypt
import pytz
from jose import JWTError, jwt

from config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET_KEY
from core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.

    Returns:
        Hashed password (bcrypt hash string).
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > _BCRYPT_MAX_BYTES:
        logger.warning(
            "Password exceeds %d bytes (%d bytes), truncating",
            _BCRYPT_MAX_BYTES,
            len(password_bytes),
        )
        password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]

    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Bcrypt hash string, or None for accounts without one.

    Returns:
        True if password matches, False otherwise.
    """
    if not hashed_password:
        return False
    password_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.error("Password verification error: %s", e)
        return False


def new_token_id() -> str:
    """Return a fresh session identifier for the ``jti`` claim."""
    return secrets.token_urlsafe(16)


def create_access_token(
    user_id: str,
    token_id: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token.

    Args:
        user_id: Subject of the token.
        token_id: Session identifier stored on the user record.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(pytz.utc) + expires_delta
    to_encode = {"sub": user_id, "jti": token_id, "exp": expire}
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Tuple[str, str]:
    """Check signature and expiry of a token.

    Args:
        token: Encoded JWT from the Authorization header.

    Returns:
        Tuple of (user_id, token_id).

    Raises:
        UnauthorizedError: If the token is malformed, tampered with or expired.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedError("Invalid token") from e

    user_id = payload.get("sub")
    token_id = payload.get("jti")
    if not user_id or not token_id:
        raise UnauthorizedError("Invalid token")
    return user_id, token_id
