"""Structured logging middleware for FastAPI requests."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

from cryptography.fernet import Fernet
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from memoir_audio.config.settings import settings
from memoir_audio.utils import AuthenticationError, decode_access_token

logger = logging.getLogger("memoir_audio.middleware.structured")

COLOR_RESET = "\u001b[0m"
COLOR_GREEN = "\u001b[32m"
COLOR_CYAN = "\u001b[36m"
COLOR_YELLOW = "\u001b[33m"
COLOR_RED = "\u001b[31m"


@dataclass(slots=True)
class SessionContext:
    """Opaque session descriptor and caller id attached to the request log."""

    identifier: str
    user_id: str


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one colored log line per HTTP request."""

    _cipher: ClassVar[Optional[Fernet]] = None

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        log_payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else None,
        }

        session_context = self._build_session_context(request, log_payload["timestamp"])
        if session_context is not None:
            log_payload["session"] = {
                "id": session_context.identifier,
                "user_id": session_context.user_id,
            }

        try:
            response = await call_next(request)
        except Exception as exc:
            log_payload["status_code"] = 500
            log_payload["duration_ms"] = self._elapsed_ms(start_time)
            log_payload["error"] = repr(exc)
            logger.exception(self._format_console_message(log_payload))
            raise

        log_payload["status_code"] = response.status_code
        log_payload["duration_ms"] = self._elapsed_ms(start_time)
        logger.info(self._format_console_message(log_payload))
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        """Return elapsed milliseconds rounded to two decimals."""

        return round((time.perf_counter() - start_time) * 1000, 2)

    def _build_session_context(
        self,
        request: Request,
        request_timestamp: str,
    ) -> SessionContext | None:
        """Construct an encrypted session descriptor for the current request."""

        token = self._extract_bearer_token(request)
        if not token:
            return None

        try:
            token_payload = decode_access_token(token)
        except AuthenticationError:
            logger.debug("Ignoring undecodable bearer token in request log")
            return None

        expires_at = token_payload.exp.astimezone(timezone.utc)
        if token_payload.iat is not None:
            started_at = token_payload.iat.astimezone(timezone.utc)
        else:
            started_at = datetime.fromisoformat(request_timestamp)

        identifier_source = f"{token_payload.sub}:{int(started_at.timestamp())}"
        session_fingerprint = hashlib.sha256(identifier_source.encode("utf-8")).hexdigest()

        encrypted_payload = {
            "session": session_fingerprint,
            "user_id": token_payload.sub,
            "started_at": started_at.isoformat(),
            "expires_at": expires_at.isoformat(),
        }
        if request.client:
            encrypted_payload["client_ip"] = request.client.host
        user_agent = request.headers.get("user-agent")
        if user_agent:
            encrypted_payload["user_agent"] = user_agent[:256]

        return SessionContext(
            identifier=self._encrypt_session_metadata(encrypted_payload),
            user_id=token_payload.sub,
        )

    @classmethod
    def _encrypt_session_metadata(cls, metadata: dict[str, Any]) -> str:
        """Encrypt session metadata into an opaque token."""

        cipher = cls._get_cipher()
        payload_bytes = json.dumps(metadata, default=str, separators=(',', ':')).encode(
            "utf-8"
        )
        return cipher.encrypt(payload_bytes).decode("utf-8")

    @classmethod
    def _get_cipher(cls) -> Fernet:
        """Return a cached Fernet cipher initialised from the JWT secret."""

        if cls._cipher is None:
            secret_bytes = (
                settings.security.jwt_secret_key.get_secret_value().encode("utf-8")
            )
            digest = hashlib.sha256(secret_bytes).digest()
            key = base64.urlsafe_b64encode(digest)
            cls._cipher = Fernet(key)
        return cls._cipher

    @staticmethod
    def _extract_bearer_token(request: Request) -> Optional[str]:
        """Return the bearer token from the request headers when present."""

        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        return token

    @staticmethod
    def _format_console_message(payload: dict[str, Any]) -> str:
        """Return minimal request metadata wrapped with ANSI color codes."""

        status = payload.get("status_code") or 0
        if 200 <= status < 300:
            color = COLOR_GREEN
        elif 400 <= status < 500:
            color = COLOR_YELLOW
        elif status >= 500:
            color = COLOR_RED
        else:
            color = COLOR_CYAN

        session_info = payload.get("session") or {}
        fields = [
            ("timestamp", payload.get("timestamp")),
            ("method", payload.get("method")),
            ("url", payload.get("url")),
            ("status", payload.get("status_code")),
            ("duration_ms", payload.get("duration_ms")),
            ("client_ip", payload.get("client_ip")),
            ("user_id", session_info.get("user_id")),
            ("session", session_info.get("id")),
        ]
        message = ", ".join(
            f"{name}={value if value is not None else '-'}" for name, value in fields
        )

        return f"{color}{message}{COLOR_RESET}"


__all__ = ["SessionContext", "StructuredLoggingMiddleware"]
