"""Provider clients shared by every request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from memoir_audio.errors import ServiceUnavailableError

from .auphonic import AuphonicClient
from .consent import ConsentGate
from .llm_client import LanguageModelClient
from .rate_limit import SlidingWindowRateLimiter
from .temp_files import TempFileManager
from .transcription import TranscriptionAdapter

ProviderChoice = Literal["primary", "secondary"]


@dataclass(frozen=True)
class ProviderRegistry:
    """Immutable bundle built once at startup and injected into handlers."""

    primary_stt: TranscriptionAdapter
    secondary_stt: TranscriptionAdapter
    llm: LanguageModelClient
    temp_files: TempFileManager
    consent: ConsentGate
    rate_limiter: Optional[SlidingWindowRateLimiter] = None
    auphonic: Optional[AuphonicClient] = None

    def transcriber(self, choice: ProviderChoice = "primary") -> TranscriptionAdapter:
        return self.secondary_stt if choice == "secondary" else self.primary_stt

    def require_auphonic(self) -> AuphonicClient:
        if self.auphonic is None:
            raise ServiceUnavailableError(
                "Auphonic integration not configured. Please set AUPHONIC_API_KEY."
            )
        return self.auphonic

    async def aclose(self) -> None:
        if self.auphonic is not None:
            await self.auphonic.aclose()


__all__ = ["ProviderChoice", "ProviderRegistry"]
