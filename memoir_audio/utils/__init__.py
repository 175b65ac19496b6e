"""Utility helpers for the memoir audio backend."""

from .security import (
    AuthenticationError,
    CallerIdentity,
    TokenPayload,
    create_access_token,
    decode_access_token,
    identity_from_token,
)

__all__ = [
    "AuthenticationError",
    "CallerIdentity",
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
    "identity_from_token",
]
