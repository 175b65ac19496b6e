"""Transcription request flow and a map of its stages.

1. ``ingestion`` – validate the upload and obtain raw audio bytes.
2. ``services.temp_files`` – stage the bytes on disk for the provider SDK.
3. ``transcription`` – one speech-to-text adapter turns audio into text.
4. ``sanitizer`` – the transcript is checked before any model sees it.
5. ``enrichment`` – formatter and lesson extractor run concurrently.
6. ``costs`` – heuristic per-stage cost attached to the response.

The staged file is released as soon as the provider is done with it, on
every exit path.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Iterable, List

from memoir_audio.services.temp_files import TempFileManager
from memoir_audio.services.transcription import TranscriptionAdapter, TranscriptionResult

from . import costs
from .enrichment import EnrichmentChain
from .transcription import transcribe_audio
from .types import AudioAsset, CostBreakdown, EnrichedStory, TimingBreakdown

logger = logging.getLogger("memoir_audio.pipeline")


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the transcription flow."""

    order: int
    name: str
    module: str
    summary: str


@dataclass(frozen=True)
class PipelineRun:
    """Everything one transcription pipeline produced for a single asset."""

    transcription: TranscriptionResult
    story: EnrichedStory
    timing: TimingBreakdown
    cost: CostBreakdown


class TranscriptionPipeline:
    """Stage, transcribe, then enrich one asset with a single adapter."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Ingestion",
            "memoir_audio.pipelines.audio.ingestion",
            "Resolve content type, enforce the size limit, read the upload into memory.",
        ),
        PipelineStage(
            2,
            "Staging",
            "memoir_audio.services.temp_files",
            "Write the bytes to a uniquely named temp file released on scope exit.",
        ),
        PipelineStage(
            3,
            "Transcription",
            "memoir_audio.pipelines.audio.transcription",
            "Forward the audio to the selected speech-to-text provider.",
        ),
        PipelineStage(
            4,
            "Prompt Guard",
            "memoir_audio.pipelines.audio.sanitizer",
            "Sanitize and validate the transcript; unsafe text skips enrichment.",
        ),
        PipelineStage(
            5,
            "Enrichment",
            "memoir_audio.pipelines.audio.enrichment",
            "Format the story and extract lesson options concurrently.",
        ),
        PipelineStage(
            6,
            "Cost Estimate",
            "memoir_audio.pipelines.audio.costs",
            "Attach heuristic per-stage costs and latencies.",
        ),
    ]

    def __init__(
        self,
        transcriber: TranscriptionAdapter,
        enrichment: EnrichmentChain,
        temp_files: TempFileManager,
        *,
        llm_input_cost_per_million: float = 0.035,
        llm_output_cost_per_million: float = 0.14,
    ) -> None:
        self.transcriber = transcriber
        self.enrichment = enrichment
        self.temp_files = temp_files
        self._input_rate = llm_input_cost_per_million
        self._output_rate = llm_output_cost_per_million

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    async def transcribe(self, asset: AudioAsset) -> TranscriptionResult:
        async with self.temp_files.stage(asset.data, asset.suffix) as staged:
            return await transcribe_audio(self.transcriber, replace(asset, path=staged.path))

    async def run(self, asset: AudioAsset) -> PipelineRun:
        started = time.perf_counter()
        transcription = await self.transcribe(asset)
        story = await self.enrichment.enrich(transcription.raw_text)
        total_ms = int((time.perf_counter() - started) * 1000)

        timing = TimingBreakdown(
            transcription_ms=transcription.transcription_latency_ms,
            formatting_ms=story.formatting_ms,
            lesson_extraction_ms=story.lesson_extraction_ms,
            total_ms=total_ms,
        )
        cost = self.estimate_cost(asset, transcription, story)
        logger.info(
            "Transcription flow complete provider=%s source=%s total_ms=%s cost=%.6f",
            transcription.provider_id,
            story.source,
            total_ms,
            cost.total,
        )
        return PipelineRun(transcription=transcription, story=story, timing=timing, cost=cost)

    def estimate_cost(
        self,
        asset: AudioAsset,
        transcription: TranscriptionResult,
        story: EnrichedStory,
    ) -> CostBreakdown:
        cost = CostBreakdown(
            transcription=costs.transcription_cost(transcription.provider_id, asset.size_bytes),
        )
        if story.source == "unsafe":
            return cost

        text_length = len(transcription.raw_text)
        cost.formatting = costs.formatting_cost(
            text_length,
            input_rate_per_million=self._input_rate,
            output_rate_per_million=self._output_rate,
        )
        cost.lesson_extraction = costs.lesson_extraction_cost(
            text_length,
            input_rate_per_million=self._input_rate,
            output_rate_per_million=self._output_rate,
        )
        return cost


__all__ = ["PipelineRun", "PipelineStage", "TranscriptionPipeline"]
