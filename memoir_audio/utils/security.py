"""JWT helpers for caller identity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from memoir_audio.config.settings import settings


class AuthenticationError(Exception):
    """Raised when a JWT cannot be decoded or is otherwise invalid."""


class TokenPayload(BaseModel):
    """Minimal payload structure embedded in JWT access tokens."""

    sub: str
    exp: datetime
    iat: datetime | None = None
    user: dict[str, Any] | None = None
    ai_processing_enabled: bool = True


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as seen by the handlers."""

    user_id: str
    ai_processing_enabled: bool = True


def create_access_token(
    subject: str,
    *,
    ai_processing_enabled: bool = True,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Generate a signed JWT access token for the provided subject."""

    now = datetime.now(timezone.utc)
    expires_delta = expires_delta or timedelta(
        minutes=settings.security.access_token_expires_minutes
    )
    to_encode: dict[str, Any] = {
        "sub": subject,
        "exp": now + expires_delta,
        "iat": now,
        "ai_processing_enabled": ai_processing_enabled,
    }

    secret = settings.security.jwt_secret_key.get_secret_value()
    return jwt.encode(
        to_encode,
        secret,
        algorithm=settings.security.jwt_algorithm,
    )


def decode_access_token(token: str) -> TokenPayload:
    """Decode and validate a JWT access token, returning its payload."""

    secret = settings.security.jwt_secret_key.get_secret_value()
    try:
        payload = jwt.decode(
            token, secret, algorithms=[settings.security.jwt_algorithm]
        )
        return TokenPayload.model_validate(payload)
    except (JWTError, ValidationError) as exc:
        raise AuthenticationError("Invalid authentication token") from exc


def identity_from_token(token: str) -> CallerIdentity:
    payload = decode_access_token(token)
    return CallerIdentity(
        user_id=payload.sub,
        ai_processing_enabled=payload.ai_processing_enabled,
    )


__all__ = [
    "AuthenticationError",
    "CallerIdentity",
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
    "identity_from_token",
]
