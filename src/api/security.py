"""Password hashing and bearer token utilities."""

from datetime import UTC, datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from src.api.config import ApiConfig


def hash_password(password: str) -> str:
    """Hash a password for storage.

    Note: bcrypt has a 72 byte limit, so longer passwords are truncated.
    """
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a stored hash."""
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def create_access_token(
    uid: str,
    config: ApiConfig,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed token whose subject is the user id."""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=config.access_token_minutes)
    )
    return jwt.encode(
        {"sub": uid, "exp": expire},
        config.secret_key,
        algorithm=config.token_algorithm,
    )


def decode_access_token(token: str, config: ApiConfig) -> str | None:
    """Verify a token and return its user id, or None if invalid/expired.

    Verification is purely cryptographic and never reads the store.
    """
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.token_algorithm])
    except JWTError:
        return None
    uid = payload.get("sub")
    return uid if isinstance(uid, str) and uid else None
