from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from apace.core.config import settings
from apace.core.errors import AuthenticationError

ACCESS = "access"
REFRESH = "refresh"


def _encode(subject: str, role: str, token_type: str, secret: str, lifetime: timedelta) -> str:
    expire = datetime.now(timezone.utc) + lifetime
    to_encode = {"sub": str(subject), "role": role, "type": token_type, "exp": expire}
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        subject, role, ACCESS, settings.JWT_SECRET, expires_delta or settings.access_token_lifetime
    )


def create_refresh_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        subject, role, REFRESH, settings.JWT_REFRESH_SECRET, expires_delta or settings.refresh_token_lifetime
    )


def create_token_pair(subject: str, role: str) -> dict:
    return {
        "token": create_access_token(subject, role),
        "refreshToken": create_refresh_token(subject, role),
    }


def _decode(token: str, secret: str, token_type: str) -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token. Please log in again.")
    if payload.get("type") != token_type or not payload.get("sub") or not payload.get("role"):
        raise AuthenticationError("Invalid or expired token. Please log in again.")
    return payload


def decode_access_token(token: str) -> dict:
    return _decode(token, settings.JWT_SECRET, ACCESS)


def decode_refresh_token(token: str) -> dict:
    return _decode(token, settings.JWT_REFRESH_SECRET, REFRESH)
