"""Transcript pre-pass applied before the formatting model.

Pattern-based removal of filler words and stutters. It trims tokens before
the model call, and its output is what the caller receives whenever the
formatter fails.
"""

from __future__ import annotations

import re

_FILLER_WORDS = re.compile(r"\b(?:um+|uh+|er|ah)\b[,]?", re.IGNORECASE)
_FILLER_PHRASES = re.compile(r"\s+(?:like|you know),?\s+", re.IGNORECASE)
_REPEATED_WORDS = re.compile(r"\b(\w+)(?:,?\s+\1\b)+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,!?;:])")
_DUPLICATE_COMMAS = re.compile(r",\s*,+")
_LEADING_PUNCTUATION = re.compile(r"^[\s,;:]+")


def strip_disfluencies(transcript: str) -> str:
    """Remove fillers, collapse stutters like "I I was" and normalise spacing."""

    if not transcript or not transcript.strip():
        return ""

    cleaned = _FILLER_WORDS.sub("", transcript)
    cleaned = _FILLER_PHRASES.sub(" ", cleaned)
    cleaned = _REPEATED_WORDS.sub(r"\1", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned)
    cleaned = _SPACE_BEFORE_PUNCTUATION.sub(r"\1", cleaned)
    cleaned = _DUPLICATE_COMMAS.sub(",", cleaned)
    cleaned = _LEADING_PUNCTUATION.sub("", cleaned)
    return cleaned.strip()


__all__ = ["strip_disfluencies"]
