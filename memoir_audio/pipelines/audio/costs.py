"""Duration and cost heuristics used for telemetry and provider comparison.

All figures are estimates derived from the upload size (1 MB ≈ 60 s of
speech) and list prices; they are never reconciled against billing.
"""

from __future__ import annotations

import difflib
import math
from typing import Final

BYTES_PER_MINUTE: Final[int] = 1024 * 1024

# USD per audio minute.
STT_RATES_PER_MINUTE: Final[dict[str, float]] = {
    "assemblyai": 0.0025,
    "amazon-transcribe": 0.024,
}
CLEANUP_RATE_PER_MINUTE: Final[float] = 11.0 / (9 * 60)

_PROMPT_OVERHEAD_TOKENS = 1000
_INPUT_TOKENS_PER_CHAR = 1.5
_OUTPUT_TOKENS_PER_CHAR = 1.8
_LESSON_OUTPUT_TOKENS = 200


def estimate_duration_minutes(size_bytes: int) -> float:
    """Estimate spoken minutes from the byte size of an upload."""

    if size_bytes <= 0:
        return 0.0
    return size_bytes / BYTES_PER_MINUTE


def estimate_duration_seconds(size_bytes: int) -> int:
    return round(estimate_duration_minutes(size_bytes) * 60)


def transcription_cost(provider_id: str, size_bytes: int) -> float:
    rate = STT_RATES_PER_MINUTE.get(provider_id, 0.0)
    return estimate_duration_minutes(size_bytes) * rate


def cleanup_cost(size_bytes: int) -> float:
    return estimate_duration_minutes(size_bytes) * CLEANUP_RATE_PER_MINUTE


def _token_cost(
    input_tokens: int,
    output_tokens: int,
    input_rate_per_million: float,
    output_rate_per_million: float,
) -> float:
    return (
        input_tokens / 1_000_000 * input_rate_per_million
        + output_tokens / 1_000_000 * output_rate_per_million
    )


def formatting_cost(
    text_length: int,
    *,
    input_rate_per_million: float,
    output_rate_per_million: float,
) -> float:
    """Estimate the model cost of rewriting ``text_length`` characters."""

    if text_length <= 0:
        return 0.0
    input_tokens = math.ceil(text_length * _INPUT_TOKENS_PER_CHAR) + _PROMPT_OVERHEAD_TOKENS
    output_tokens = math.ceil(text_length * _OUTPUT_TOKENS_PER_CHAR)
    return _token_cost(input_tokens, output_tokens, input_rate_per_million, output_rate_per_million)


def lesson_extraction_cost(
    text_length: int,
    *,
    input_rate_per_million: float,
    output_rate_per_million: float,
) -> float:
    if text_length <= 0:
        return 0.0
    input_tokens = math.ceil(text_length * _INPUT_TOKENS_PER_CHAR) + _PROMPT_OVERHEAD_TOKENS
    return _token_cost(
        input_tokens,
        _LESSON_OUTPUT_TOKENS,
        input_rate_per_million,
        output_rate_per_million,
    )


def count_words(text: str) -> int:
    return len(text.split())


def text_difference_percent(first: str, second: str) -> int:
    """Return 0 for identical texts up to 100 for entirely different ones."""

    if not first and not second:
        return 0
    similarity = difflib.SequenceMatcher(None, first, second, autojunk=False).ratio()
    return round((1 - similarity) * 100)


__all__ = [
    "BYTES_PER_MINUTE",
    "CLEANUP_RATE_PER_MINUTE",
    "STT_RATES_PER_MINUTE",
    "cleanup_cost",
    "count_words",
    "estimate_duration_minutes",
    "estimate_duration_seconds",
    "formatting_cost",
    "lesson_extraction_cost",
    "text_difference_percent",
    "transcription_cost",
]
