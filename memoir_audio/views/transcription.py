"""Schemas for the transcription endpoint."""

from typing import Optional

from pydantic import Field

from memoir_audio.pipelines.audio import PipelineRun
from memoir_audio.pipelines.audio.costs import estimate_duration_seconds

from .common import CamelModel


class LessonOptionsView(CamelModel):
    practical: str
    emotional: str
    character: str


class TranscriptionLatencies(CamelModel):
    transcription_ms: int
    formatting_ms: int
    lesson_extraction_ms: int
    total_ms: int


class TranscriptionMeta(CamelModel):
    provider: str
    confidence: Optional[float] = None
    enrichment_source: str
    latencies: TranscriptionLatencies
    estimated_cost: float


class TranscriptionResponse(CamelModel):
    transcription: str
    duration: int
    lesson_options: LessonOptionsView
    meta: TranscriptionMeta = Field(alias="_meta")

    @classmethod
    def from_run(cls, run: PipelineRun, size_bytes: int) -> "TranscriptionResponse":
        return cls(
            transcription=run.story.formatted_text,
            duration=estimate_duration_seconds(size_bytes),
            lesson_options=LessonOptionsView(**run.story.lesson_options.as_dict()),
            meta=TranscriptionMeta(
                provider=run.transcription.provider_id,
                confidence=run.transcription.confidence,
                enrichment_source=run.story.source,
                latencies=TranscriptionLatencies(
                    transcription_ms=run.timing.transcription_ms,
                    formatting_ms=run.timing.formatting_ms,
                    lesson_extraction_ms=run.timing.lesson_extraction_ms,
                    total_ms=run.timing.total_ms,
                ),
                estimated_cost=round(run.cost.total, 6),
            ),
        )
