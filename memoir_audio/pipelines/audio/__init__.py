"""Audio processing pipeline package.

Modules are organised by the order in which a transcription request runs:

1. `ingestion` – read and validate the upload.
2. `transcription` – call one speech-to-text adapter.
3. `sanitizer` – guard the transcript before any model sees it.
4. `enrichment` – formatter (`cleaning`, `prompts`) and lesson extractor.
5. `flow` – the end-to-end transcription pipeline and its stage map.

`production` drives the audio cleanup job and `comparison` runs several
pipelines side by side. `costs` holds the heuristic estimators shared by all.
"""

from .comparison import (
    ComparisonHarness,
    ComparisonPath,
    ComparisonReport,
    cleanup_path,
    settle_all_with_timeout,
    transcription_path,
)
from .enrichment import DEFAULT_LESSONS, EnrichmentChain, parse_lesson_options
from .flow import PipelineRun, PipelineStage, TranscriptionPipeline
from .ingestion import read_audio_bytes, read_request_audio, resolve_content_type
from .production import AudioCleanupOrchestrator, CleanupOutcome, JobState, ProductionJob
from .sanitizer import prepare_prompt_text, sanitize, validate
from .transcription import transcribe_audio
from .types import AudioAsset, EnrichedStory, LessonOptions, PipelinePath

__all__ = [
    "AudioAsset",
    "AudioCleanupOrchestrator",
    "CleanupOutcome",
    "ComparisonHarness",
    "ComparisonPath",
    "ComparisonReport",
    "DEFAULT_LESSONS",
    "EnrichedStory",
    "EnrichmentChain",
    "JobState",
    "LessonOptions",
    "PipelinePath",
    "PipelineRun",
    "PipelineStage",
    "ProductionJob",
    "TranscriptionPipeline",
    "cleanup_path",
    "parse_lesson_options",
    "prepare_prompt_text",
    "read_audio_bytes",
    "read_request_audio",
    "resolve_content_type",
    "sanitize",
    "settle_all_with_timeout",
    "transcribe_audio",
    "transcription_path",
    "validate",
]
