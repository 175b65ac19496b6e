"""Request ingestion helpers: turn an upload into an ``AudioAsset``."""

from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Any, Final

from fastapi import Request, UploadFile

from memoir_audio.errors import AudioValidationError

from .types import AudioAsset

AUDIO_FIELD: Final[str] = "audio"
_DEFAULT_CONTENT_TYPE: Final[str] = "audio/webm"


def resolve_content_type(audio_file: UploadFile) -> str:
    """Use the declared type, then the filename, then assume browser webm."""

    content_type = audio_file.content_type
    if (not content_type or content_type == "application/octet-stream") and audio_file.filename:
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type or content_type

    content_type = content_type or _DEFAULT_CONTENT_TYPE
    base_type = content_type.split(";")[0].strip().lower()
    if not (base_type.startswith("audio/") or base_type in {"video/webm", "application/octet-stream"}):
        raise AudioValidationError(f"Unsupported audio type: {base_type}")
    return content_type


def ensure_within_limit(size_bytes: int, max_bytes: int) -> None:
    if size_bytes > max_bytes:
        raise AudioValidationError(
            f"Audio file too large. Maximum size is {max_bytes // (1024 * 1024)}MB, "
            f"got {size_bytes / 1024 / 1024:.1f}MB"
        )


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int) -> AudioAsset:
    """Load the upload fully into memory, rejecting empty or oversized payloads."""

    content_type = resolve_content_type(audio_file)
    audio_bytes = await audio_file.read()
    await audio_file.close()

    if not audio_bytes:
        raise AudioValidationError("Uploaded audio file is empty")
    ensure_within_limit(len(audio_bytes), max_bytes)
    return AudioAsset(data=audio_bytes, content_type=content_type)


def decode_base64_audio(payload: Any, max_bytes: int) -> AudioAsset:
    """Accept ``{"audioBase64": ..., "contentType"?: ...}`` JSON bodies."""

    if not isinstance(payload, dict) or not payload.get("audioBase64"):
        raise AudioValidationError("No audio data provided")
    try:
        audio_bytes = base64.b64decode(str(payload["audioBase64"]), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AudioValidationError("Audio data is not valid base64") from exc

    if not audio_bytes:
        raise AudioValidationError("Uploaded audio file is empty")
    ensure_within_limit(len(audio_bytes), max_bytes)
    return AudioAsset(
        data=audio_bytes,
        content_type=str(payload.get("contentType") or _DEFAULT_CONTENT_TYPE),
    )


async def read_request_audio(request: Request, max_bytes: int) -> AudioAsset:
    """Read audio from a multipart ``audio`` field or a base64 JSON body."""

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:
            raise AudioValidationError("Request body is not valid JSON") from exc
        return decode_base64_audio(payload, max_bytes)

    if not content_type.startswith("multipart/form-data"):
        raise AudioValidationError("No audio file provided")

    form = await request.form()
    audio_file = form.get(AUDIO_FIELD)
    if audio_file is None or isinstance(audio_file, str):
        raise AudioValidationError("No audio file provided")
    return await read_audio_bytes(audio_file, max_bytes)


__all__ = [
    "AUDIO_FIELD",
    "decode_base64_audio",
    "ensure_within_limit",
    "read_audio_bytes",
    "read_request_audio",
    "resolve_content_type",
]
