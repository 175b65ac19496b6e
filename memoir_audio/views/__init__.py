"""Pydantic schemas used as views in the MVC architecture."""

from .cleanup import CleanupMeta, CleanupResponse
from .common import CamelModel, ErrorResponse
from .comparison import AudioMetadata, ComparisonResponse, PathResult
from .transcription import (
    LessonOptionsView,
    TranscriptionLatencies,
    TranscriptionMeta,
    TranscriptionResponse,
)

__all__ = [
    "AudioMetadata",
    "CamelModel",
    "CleanupMeta",
    "CleanupResponse",
    "ComparisonResponse",
    "ErrorResponse",
    "LessonOptionsView",
    "PathResult",
    "TranscriptionLatencies",
    "TranscriptionMeta",
    "TranscriptionResponse",
]
