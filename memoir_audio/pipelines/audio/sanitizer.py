"""Prompt guard for transcript text headed to the language model.

``sanitize`` neutralises injected instructions and control characters;
``validate`` decides whether the sanitized text may be embedded in a
prompt at all. Callers must run both before any model call and fall back to
the user's own words when validation fails.
"""

from __future__ import annotations

import re
from typing import Final, Pattern

MAX_PROMPT_TEXT_LENGTH: Final[int] = 10_000

_STRIP_PATTERNS: Final[tuple[Pattern[str], ...]] = (
    re.compile(r"\b(?:system|assistant|user)\s*:", re.IGNORECASE),
    re.compile(r"\bignore\s+(?:all\s+)?previous\b", re.IGNORECASE),
    re.compile(r"\b(?:disregard|forget|override)\s+previous\b", re.IGNORECASE),
    re.compile(r"\b(?:new|actual|real)\s+instructions\b", re.IGNORECASE),
    re.compile(r"\{\{.*?\}\}", re.DOTALL),
    re.compile(r"\$\{.*?\}", re.DOTALL),
    re.compile(r"\[(?:SYSTEM|INST|/INST)\]", re.IGNORECASE),
)

_INJECTION_SIGNATURES: Final[tuple[Pattern[str], ...]] = (
    re.compile(r"\bsystem\s*:", re.IGNORECASE),
    re.compile(r"ignore\s+(?:all\s+)?previous", re.IGNORECASE),
    re.compile(r"(?:disregard|forget)\s+(?:all\s+)?previous\s+instructions", re.IGNORECASE),
    re.compile(r"reveal\s+(?:your\s+|the\s+)?system\s+prompt", re.IGNORECASE),
    re.compile(r"\{\{.*?\}\}", re.DOTALL),
    re.compile(r"\[(?:SYSTEM|INST)\]", re.IGNORECASE),
)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_EXCESS_NEWLINES = re.compile(r"\n{4,}")
_INLINE_SPACES = re.compile(r"[ \t]{2,}")


def sanitize(text: str | None) -> str:
    """Strip injection markers and control sequences from ``text``."""

    if not text or not isinstance(text, str):
        return ""

    cleaned = _CONTROL_CHARS.sub("", text.replace("\r\n", "\n").replace("\r", "\n"))
    for pattern in _STRIP_PATTERNS:
        cleaned = pattern.sub("", cleaned)

    cleaned = _EXCESS_NEWLINES.sub("\n\n\n", cleaned)
    cleaned = _INLINE_SPACES.sub(" ", cleaned)

    if len(cleaned) > MAX_PROMPT_TEXT_LENGTH:
        cleaned = cleaned[:MAX_PROMPT_TEXT_LENGTH]
    return cleaned.strip()


def contains_injection(text: str) -> bool:
    return any(pattern.search(text) for pattern in _INJECTION_SIGNATURES)


def validate(text: str | None) -> bool:
    """Return ``True`` when ``text`` is safe to embed in a model prompt."""

    if not text or not isinstance(text, str):
        return False
    if len(text) > MAX_PROMPT_TEXT_LENGTH:
        return False
    return not contains_injection(text)


def prepare_prompt_text(raw_text: str) -> str | None:
    """Sanitize and validate ``raw_text``; ``None`` means skip the model.

    The raw transcript is screened for injection signatures first, so speech
    that contained an injected instruction is never silently repaired and
    forwarded. Length is enforced by ``sanitize`` truncating.
    """

    if not raw_text or contains_injection(raw_text):
        return None
    sanitized = sanitize(raw_text)
    if not validate(sanitized):
        return None
    return sanitized


__all__ = ["MAX_PROMPT_TEXT_LENGTH", "contains_injection", "prepare_prompt_text", "sanitize", "validate"]
