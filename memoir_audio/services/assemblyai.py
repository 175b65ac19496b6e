"""AssemblyAI implementation of the TranscriptionAdapter interface."""

from __future__ import annotations

import io
import logging
import time
from typing import Any

import assemblyai as aai
from fastapi.concurrency import run_in_threadpool

from memoir_audio.config.settings import AssemblyAIConfig
from memoir_audio.telemetry import observe_provider_call

from .transcription import TranscriptionAdapter, TranscriptionError, TranscriptionResult

logger = logging.getLogger(__name__)


def build_transcription_config(config: AssemblyAIConfig) -> aai.TranscriptionConfig:
    """Translate settings into the SDK request config (model + locale hint)."""

    kwargs: dict[str, Any] = {
        "speech_model": aai.SpeechModel(config.speech_model),
        "punctuate": True,
        "format_text": True,
    }
    if config.language_code:
        kwargs["language_code"] = config.language_code
    else:
        kwargs["language_detection"] = True
    return aai.TranscriptionConfig(**kwargs)


class AssemblyAITranscriber(TranscriptionAdapter):
    """Primary provider: batch transcription that reports a confidence score."""

    provider_id = "assemblyai"

    def __init__(self, transcriber: Any) -> None:
        self._transcriber = transcriber

    @classmethod
    def from_config(cls, config: AssemblyAIConfig) -> "AssemblyAITranscriber":
        if config.api_key:
            aai.settings.api_key = config.api_key.get_secret_value()
        aai.settings.http_timeout = config.http_timeout_seconds
        return cls(aai.Transcriber(config=build_transcription_config(config)))

    async def transcribe(self, asset) -> TranscriptionResult:
        if not asset.data:
            raise TranscriptionError(self.provider_id, "The uploaded audio file is empty.")

        source: Any = str(asset.path) if asset.path else io.BytesIO(asset.data)
        started = time.perf_counter()
        try:
            transcript = await run_in_threadpool(self._transcriber.transcribe, source)
        except Exception as exc:
            observe_provider_call(self.provider_id, "transcribe", time.perf_counter() - started, success=False)
            logger.exception("AssemblyAI transcription request failed")
            raise TranscriptionError(self.provider_id, f"AssemblyAI request failed: {exc}") from exc

        elapsed = time.perf_counter() - started
        latency_ms = int(elapsed * 1000)

        if transcript.status == aai.TranscriptStatus.error:
            observe_provider_call(self.provider_id, "transcribe", elapsed, success=False)
            raise TranscriptionError(
                self.provider_id,
                transcript.error or "AssemblyAI transcription failed",
            )

        observe_provider_call(self.provider_id, "transcribe", elapsed, success=True)
        text = (transcript.text or "").strip()
        logger.info(
            "AssemblyAI transcription complete latency_ms=%s confidence=%s chars=%s",
            latency_ms,
            transcript.confidence,
            len(text),
        )
        return TranscriptionResult(
            raw_text=text,
            provider_id=self.provider_id,
            transcription_latency_ms=latency_ms,
            confidence=transcript.confidence,
        )


__all__ = ["AssemblyAITranscriber", "build_transcription_config"]
