"""Schemas for the audio cleanup endpoint."""

import base64

from pydantic import Field

from memoir_audio.pipelines.audio import CleanupOutcome

from .common import CamelModel


class CleanupMeta(CamelModel):
    create_latency_ms: int
    poll_latency_ms: int
    download_latency_ms: int
    total_latency_ms: int
    poll_attempts: int
    status: str


class CleanupResponse(CamelModel):
    cleaned_audio_base64: str
    production_id: str
    cleaned_audio_size: int
    original_audio_size: int
    meta: CleanupMeta = Field(alias="_meta")

    @classmethod
    def from_outcome(cls, outcome: CleanupOutcome, original_size: int) -> "CleanupResponse":
        return cls(
            cleaned_audio_base64=base64.b64encode(outcome.audio).decode("ascii"),
            production_id=outcome.production_id,
            cleaned_audio_size=outcome.size_bytes,
            original_audio_size=original_size,
            meta=CleanupMeta(
                create_latency_ms=outcome.create_ms,
                poll_latency_ms=outcome.poll_ms,
                download_latency_ms=outcome.download_ms,
                total_latency_ms=outcome.total_ms,
                poll_attempts=outcome.poll_attempts,
                status=outcome.status_label,
            ),
        )
