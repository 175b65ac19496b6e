"""Enrichment stage: formatter and lesson extractor over one transcript.

Both transforms read the same sanitized text and run concurrently. Neither
can fail the request: a formatter failure yields the pre-pass text, a
lesson failure yields the three default sentences.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Final

from memoir_audio.services.llm_client import LanguageModelClient
from memoir_audio.telemetry import increment_enrichment_fallback

from .cleaning import strip_disfluencies
from .prompts import build_formatting_request, build_lesson_request
from .sanitizer import prepare_prompt_text
from .types import EnrichedStory, LessonOptions, LlmRequest

logger = logging.getLogger("memoir_audio.pipeline")

LESSON_LABELS: Final[tuple[str, ...]] = ("practical", "emotional", "character")

DEFAULT_LESSONS: Final[LessonOptions] = LessonOptions(
    practical="Every experience teaches something if you're willing to learn from it",
    emotional="The heart remembers what the mind forgets",
    character="Who you become matters more than what you achieve",
)

_LABEL_LINE = re.compile(
    r"^(?:[-*•]\s*|\d+[.)]\s*)?\**(practical|emotional|character)\**\s*:\s*(.*)$",
    re.IGNORECASE,
)
_LIST_MARKER = re.compile(r"^(?:[-*•]\s*|\d+[.)]\s*)")


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def parse_lesson_options(content: str | None) -> LessonOptions:
    """Parse labelled lesson lines, backfilling anything the model left out.

    Labelled lines win; missing labels take unlabelled lines in encounter
    order; whatever is still empty gets its default sentence.
    """

    lines = [line.strip() for line in (content or "").splitlines() if line.strip()]

    found: dict[str, str] = {}
    unlabelled: list[str] = []
    for line in lines:
        match = _LABEL_LINE.match(line)
        if match:
            label = match.group(1).lower()
            value = match.group(2).strip().strip("*").strip()
            if value and label not in found:
                found[label] = value
            continue
        stripped = _LIST_MARKER.sub("", line).strip()
        if stripped:
            unlabelled.append(stripped)

    spare = iter(unlabelled)
    values: dict[str, str] = {}
    for label in LESSON_LABELS:
        value = found.get(label) or next(spare, None)
        values[label] = value or getattr(DEFAULT_LESSONS, label)
    return LessonOptions(**values)


class Formatter:
    """Low-temperature rewrite of a transcript into paragraphed prose."""

    def __init__(self, llm: LanguageModelClient) -> None:
        self._llm = llm

    async def format(self, sanitized_text: str) -> tuple[str, bool]:
        """Return ``(text, used_model)``; the pre-pass text on any failure."""

        prepared = strip_disfluencies(sanitized_text) or sanitized_text
        request = build_formatting_request(prepared)
        try:
            formatted = await _invoke(self._llm, request)
        except Exception as exc:
            logger.warning("Formatting failed, using pre-pass text: %s", exc)
            increment_enrichment_fallback("formatting", type(exc).__name__)
            return prepared, False

        formatted = formatted.strip()
        if not formatted:
            increment_enrichment_fallback("formatting", "empty")
            return prepared, False
        return formatted, True


class LessonExtractor:
    """Higher-temperature extraction of practical/emotional/character lessons."""

    def __init__(self, llm: LanguageModelClient) -> None:
        self._llm = llm

    async def extract(self, sanitized_text: str) -> LessonOptions:
        request = build_lesson_request(sanitized_text)
        try:
            content = await _invoke(self._llm, request)
        except Exception as exc:
            logger.warning("Lesson extraction failed, using defaults: %s", exc)
            increment_enrichment_fallback("lesson_extraction", type(exc).__name__)
            return DEFAULT_LESSONS
        return parse_lesson_options(content)


async def _invoke(llm: LanguageModelClient, request: LlmRequest) -> str:
    return await llm.invoke(
        system_prompt=request.system_prompt,
        user_prompt=request.user_prompt,
        temperature=request.temperature,
        max_tokens=request.max_tokens,
    )


class EnrichmentChain:
    """Sanitize, validate, then run formatter and lesson extractor together."""

    def __init__(self, llm: LanguageModelClient) -> None:
        self.formatter = Formatter(llm)
        self.lesson_extractor = LessonExtractor(llm)

    async def enrich(self, transcript: str) -> EnrichedStory:
        prompt_text = prepare_prompt_text(transcript)
        if prompt_text is None:
            logger.warning(
                "Transcript failed prompt validation; skipping enrichment (%s chars)",
                len(transcript or ""),
            )
            increment_enrichment_fallback("enrichment", "unsafe_input")
            return EnrichedStory(
                formatted_text=transcript,
                lesson_options=DEFAULT_LESSONS,
                source="unsafe",
            )

        async def timed_format() -> tuple[tuple[str, bool], int]:
            started = time.perf_counter()
            result = await self.formatter.format(prompt_text)
            return result, _elapsed_ms(started)

        async def timed_lessons() -> tuple[LessonOptions, int]:
            started = time.perf_counter()
            result = await self.lesson_extractor.extract(prompt_text)
            return result, _elapsed_ms(started)

        format_outcome, lesson_outcome = await asyncio.gather(
            timed_format(),
            timed_lessons(),
            return_exceptions=True,
        )

        if isinstance(format_outcome, BaseException):
            logger.error("Formatter crashed: %s", format_outcome)
            formatted_text, used_model, formatting_ms = strip_disfluencies(prompt_text), False, 0
        else:
            (formatted_text, used_model), formatting_ms = format_outcome

        if isinstance(lesson_outcome, BaseException):
            logger.error("Lesson extractor crashed: %s", lesson_outcome)
            lessons, lesson_ms = DEFAULT_LESSONS, 0
        else:
            lessons, lesson_ms = lesson_outcome

        return EnrichedStory(
            formatted_text=formatted_text or transcript,
            lesson_options=lessons,
            source="model" if used_model else "fallback",
            formatting_ms=formatting_ms,
            lesson_extraction_ms=lesson_ms,
        )


__all__ = [
    "DEFAULT_LESSONS",
    "EnrichmentChain",
    "Formatter",
    "LESSON_LABELS",
    "LessonExtractor",
    "parse_lesson_options",
]
