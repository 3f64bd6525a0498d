from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Dict

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from .config import InkwellSettings


class TokenData(BaseModel):
    """Decoded JWT payload."""

    userId: str
    email: str
    iat: int
    exp: int


@lru_cache(maxsize=None)
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a plaintext password with a salted bcrypt hash of the given cost."""
    return _pwd_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Malformed hashes never verify."""
    try:
        return _pwd_context(12).verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: str, email: str, settings: InkwellSettings) -> str:
    """Create a signed JWT embedding the user id and email."""
    now = datetime.now(UTC)
    payload: Dict[str, Any] = {
        "userId": user_id,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.JWT_EXPIRES_IN)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: InkwellSettings) -> TokenData:
    """Decode and validate a JWT, returning a typed payload.

    Raises:
        jwt.InvalidTokenError: On a bad signature, expiry, malformed token or
            missing claims (``jwt.ExpiredSignatureError`` for expiry).
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp", "userId"]},
    )
    try:
        return TokenData(**payload)
    except ValueError as e:
        raise jwt.InvalidTokenError(f"Malformed token payload: {e}") from e
