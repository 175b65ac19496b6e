"""Typed containers shared across the audio pipelines.

These dataclasses live in their own module so the other stages
(`enrichment`, `production`, `comparison`, `flow`) can import them without
creating circular dependencies.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

from .costs import estimate_duration_minutes

EnrichmentSource = Literal["model", "fallback", "unsafe"]
PathStatus = Literal["success", "error", "timeout"]

_SUFFIXES = {
    "audio/webm": ".webm",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/mp4": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/m4a": ".m4a",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/ogg": ".ogg",
}


@dataclass(frozen=True)
class AudioAsset:
    """Raw audio owned by a single request."""

    data: bytes
    content_type: str = "audio/webm"
    path: Optional[Path] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def duration_minutes(self) -> float:
        return estimate_duration_minutes(self.size_bytes)

    @property
    def suffix(self) -> str:
        base_type = self.content_type.split(";")[0].strip()
        return _SUFFIXES.get(base_type) or mimetypes.guess_extension(base_type) or ".webm"


@dataclass(frozen=True)
class LlmRequest:
    """Normalized payload handed to the language-model client."""

    stage: str
    system_prompt: str
    user_prompt: str
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class LessonOptions:
    """Three labelled maxims offered as seed text for the lesson field."""

    practical: str
    emotional: str
    character: str

    def as_dict(self) -> dict[str, str]:
        return {
            "practical": self.practical,
            "emotional": self.emotional,
            "character": self.character,
        }


@dataclass(frozen=True)
class EnrichedStory:
    """Output of the enrichment chain for one transcript."""

    formatted_text: str
    lesson_options: LessonOptions
    source: EnrichmentSource
    formatting_ms: int = 0
    lesson_extraction_ms: int = 0


@dataclass
class TimingBreakdown:
    transcription_ms: int = 0
    formatting_ms: int = 0
    lesson_extraction_ms: int = 0
    cleanup_ms: int = 0
    total_ms: int = 0


@dataclass
class CostBreakdown:
    transcription: float = 0.0
    formatting: float = 0.0
    lesson_extraction: float = 0.0
    cleanup: float = 0.0

    @property
    def total(self) -> float:
        return self.transcription + self.formatting + self.lesson_extraction + self.cleanup


@dataclass
class PathQuality:
    transcription: str = ""
    formatted: str = ""
    lessons: dict[str, str] = field(
        default_factory=lambda: {"practical": "", "emotional": "", "character": ""}
    )
    word_count: int = 0
    confidence: Optional[float] = None


@dataclass
class PipelinePath:
    """Normalized report for one pipeline under comparison."""

    name: str
    status: PathStatus
    timing: TimingBreakdown = field(default_factory=TimingBreakdown)
    cost: CostBreakdown = field(default_factory=CostBreakdown)
    quality: PathQuality = field(default_factory=PathQuality)
    error: Optional[str] = None
    difference_from_baseline: Optional[int] = None


__all__ = [
    "AudioAsset",
    "CostBreakdown",
    "EnrichedStory",
    "EnrichmentSource",
    "LessonOptions",
    "LlmRequest",
    "PathQuality",
    "PathStatus",
    "PipelinePath",
    "TimingBreakdown",
]
