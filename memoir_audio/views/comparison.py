"""Schemas for the pipeline comparison endpoint."""

from typing import Optional

from memoir_audio.pipelines.audio import ComparisonReport, PipelinePath

from .common import CamelModel


class PathTiming(CamelModel):
    transcription_ms: int
    formatting_ms: int
    lesson_extraction_ms: int
    cleanup_ms: int
    total_ms: int


class PathCost(CamelModel):
    transcription: float
    formatting: float
    lesson_extraction: float
    cleanup: float
    total: float


class PathQualityView(CamelModel):
    transcription: str
    formatted: str
    lessons: dict[str, str]
    word_count: int
    confidence: Optional[float] = None


class PathResult(CamelModel):
    path_name: str
    status: str
    timing: PathTiming
    cost: PathCost
    quality: PathQualityView
    error: Optional[str] = None
    difference_from_baseline: Optional[int] = None

    @classmethod
    def from_path(cls, path: PipelinePath) -> "PathResult":
        return cls(
            path_name=path.name,
            status=path.status,
            timing=PathTiming(
                transcription_ms=path.timing.transcription_ms,
                formatting_ms=path.timing.formatting_ms,
                lesson_extraction_ms=path.timing.lesson_extraction_ms,
                cleanup_ms=path.timing.cleanup_ms,
                total_ms=path.timing.total_ms,
            ),
            cost=PathCost(
                transcription=round(path.cost.transcription, 6),
                formatting=round(path.cost.formatting, 6),
                lesson_extraction=round(path.cost.lesson_extraction, 6),
                cleanup=round(path.cost.cleanup, 6),
                total=round(path.cost.total, 6),
            ),
            quality=PathQualityView(
                transcription=path.quality.transcription,
                formatted=path.quality.formatted,
                lessons=dict(path.quality.lessons),
                word_count=path.quality.word_count,
                confidence=path.quality.confidence,
            ),
            error=path.error,
            difference_from_baseline=path.difference_from_baseline,
        )


class AudioMetadata(CamelModel):
    file_size_bytes: int
    estimated_duration_minutes: float


class ComparisonResponse(CamelModel):
    test_total_ms: int
    audio_metadata: AudioMetadata
    results: dict[str, PathResult]

    @classmethod
    def from_report(cls, report: ComparisonReport) -> "ComparisonResponse":
        return cls(
            test_total_ms=report.test_total_ms,
            audio_metadata=AudioMetadata(
                file_size_bytes=report.file_size_bytes,
                estimated_duration_minutes=report.estimated_duration_minutes,
            ),
            results={name: PathResult.from_path(path) for name, path in report.results.items()},
        )
