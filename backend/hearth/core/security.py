from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import jwt

from hearth.core.config import settings


def create_access_token(subject: str | UUID, expires_delta: timedelta | None = None, **claims: Any) -> str:
    """Issue an HS256 token whose ``sub`` is the auth-subsystem user id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: dict[str, Any] = {"exp": expire, "sub": str(subject), **claims}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
