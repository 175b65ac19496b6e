"""Shared fakes for the pipeline and API tests."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from memoir_audio.services.consent import ConsentGate  # noqa: E402
from memoir_audio.services.registry import ProviderRegistry  # noqa: E402
from memoir_audio.services.temp_files import TempFileManager  # noqa: E402
from memoir_audio.services.transcription import (  # noqa: E402
    TranscriptionAdapter,
    TranscriptionError,
    TranscriptionResult,
)

LESSON_REPLY = (
    "PRACTICAL: Measure twice, cut once\n"
    "EMOTIONAL: Love shows up in small repairs\n"
    "CHARACTER: Patience is a kind of courage"
)


class FakeLlm:
    """Records every call; formatting calls get ``formatted``, lesson calls ``lessons``."""

    def __init__(
        self,
        formatted: str = "Formatted story.",
        lessons: str = LESSON_REPLY,
        error: Optional[Exception] = None,
    ) -> None:
        self.formatted = formatted
        self.lessons = lessons
        self.error = error
        self.calls: list[dict] = []

    async def invoke(self, *, system_prompt, user_prompt, temperature=None, max_tokens=None):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        if "<story>" in user_prompt:
            return self.lessons
        return self.formatted


class FakeTranscriber(TranscriptionAdapter):
    def __init__(
        self,
        provider_id: str = "assemblyai",
        text: str = "um I I grew up on a farm",
        confidence: Optional[float] = 0.93,
        error: Optional[str] = None,
    ) -> None:
        self.provider_id = provider_id
        self.text = text
        self.confidence = confidence
        self.error = error
        self.seen_paths: list[Optional[Path]] = []

    async def transcribe(self, asset) -> TranscriptionResult:
        self.seen_paths.append(asset.path)
        if self.error:
            raise TranscriptionError(self.provider_id, self.error, status=500)
        return TranscriptionResult(
            raw_text=self.text,
            provider_id=self.provider_id,
            transcription_latency_ms=12,
            confidence=self.confidence,
        )


@pytest.fixture
def fake_llm() -> FakeLlm:
    return FakeLlm()


@pytest.fixture
def temp_files(tmp_path: Path) -> TempFileManager:
    return TempFileManager(tmp_path / "staging")


@pytest.fixture
def registry(fake_llm: FakeLlm, temp_files: TempFileManager) -> ProviderRegistry:
    return ProviderRegistry(
        primary_stt=FakeTranscriber("assemblyai"),
        secondary_stt=FakeTranscriber("amazon-transcribe", text="I grew up on a farm", confidence=None),
        llm=fake_llm,
        temp_files=temp_files,
        consent=ConsentGate(["blocked-user"]),
    )
