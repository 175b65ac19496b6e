"""Transcription stage of the audio pipelines."""

from __future__ import annotations

import logging

from memoir_audio.errors import ProviderError
from memoir_audio.services.transcription import (
    TranscriptionAdapter,
    TranscriptionError,
    TranscriptionResult,
)

from .types import AudioAsset

logger = logging.getLogger("memoir_audio.pipeline")
transcript_logger = logging.getLogger("memoir_audio.logs.transcript")

TRANSCRIPTION_FAILED_MESSAGE = "Transcription failed"


async def transcribe_audio(adapter: TranscriptionAdapter, asset: AudioAsset) -> TranscriptionResult:
    """Run one adapter and surface its failure as a request-fatal provider error."""

    try:
        result = await adapter.transcribe(asset)
    except TranscriptionError as exc:
        logger.exception("Transcription failed provider=%s: %s", exc.provider, exc.message)
        raise ProviderError(exc.provider, TRANSCRIPTION_FAILED_MESSAGE, status=exc.status) from exc

    transcript_logger.info(
        "provider=%s | latency_ms=%s | confidence=%s | text=%s",
        result.provider_id,
        result.transcription_latency_ms,
        result.confidence,
        result.raw_text,
    )
    return result


__all__ = ["TRANSCRIPTION_FAILED_MESSAGE", "transcribe_audio"]
