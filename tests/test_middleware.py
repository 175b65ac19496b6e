"""Request logging middleware session descriptor."""

from __future__ import annotations

import dataclasses
import json
from datetime import datetime, timezone

from starlette.requests import Request

from memoir_audio.middleware.logging import SessionContext, StructuredLoggingMiddleware
from memoir_audio.utils import create_access_token


async def _noop_app(scope, receive, send):
    return None


def _request(headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/transcribe",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": ("203.0.113.9", 5000),
        "query_string": b"",
    }
    return Request(scope)


def test_session_context_carries_only_logged_fields():
    assert {field.name for field in dataclasses.fields(SessionContext)} == {"identifier", "user_id"}


def test_session_descriptor_is_encrypted_metadata_for_the_caller():
    middleware = StructuredLoggingMiddleware(_noop_app)
    request = _request({"Authorization": f"Bearer {create_access_token('user-7')}", "User-Agent": "recorder/1.0"})

    context = middleware._build_session_context(request, datetime.now(timezone.utc).isoformat())

    assert context is not None
    assert context.user_id == "user-7"
    decrypted = json.loads(StructuredLoggingMiddleware._get_cipher().decrypt(context.identifier.encode()))
    assert decrypted["user_id"] == "user-7"
    assert decrypted["client_ip"] == "203.0.113.9"
    assert decrypted["user_agent"] == "recorder/1.0"
    assert len(decrypted["session"]) == 64


def test_undecodable_token_yields_no_session():
    middleware = StructuredLoggingMiddleware(_noop_app)

    context = middleware._build_session_context(
        _request({"Authorization": "Bearer garbage"}),
        datetime.now(timezone.utc).isoformat(),
    )

    assert context is None


def test_console_line_includes_user_and_session():
    line = StructuredLoggingMiddleware._format_console_message(
        {"status_code": 200, "method": "GET", "session": {"id": "abc", "user_id": "user-7"}}
    )

    assert "user_id=user-7" in line
    assert "session=abc" in line
