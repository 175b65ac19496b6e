"""Contract shared by the speech-to-text adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from memoir_audio.pipelines.audio.types import AudioAsset


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to the pipelines."""

    raw_text: str
    provider_id: str
    transcription_latency_ms: int
    confidence: Optional[float] = None


class TranscriptionError(RuntimeError):
    """Raised when a provider fails to turn audio into text."""

    def __init__(self, provider: str, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.message = message


class TranscriptionAdapter(ABC):
    """Abstract base class for speech-to-text backends."""

    provider_id: str

    @abstractmethod
    async def transcribe(self, asset: "AudioAsset") -> TranscriptionResult:
        """
        Transcribe the audio asset.

        Args:
            asset: Request-owned audio; ``asset.path`` is set while staged.

        Returns:
            The transcript with latency and, when the provider reports it,
            a confidence score.

        Raises:
            TranscriptionError: If the provider rejects or fails the audio.
        """


__all__ = ["TranscriptionAdapter", "TranscriptionError", "TranscriptionResult"]
