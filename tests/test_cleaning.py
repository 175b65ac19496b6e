"""Formatter pre-pass."""

from __future__ import annotations

from memoir_audio.pipelines.audio.cleaning import strip_disfluencies


def test_removes_fillers_and_stutters():
    text = "Um, I I was, was born in uh 1950 , you know in Texas."

    assert strip_disfluencies(text) == "I was born in 1950, in Texas."


def test_blank_input_returns_empty_string():
    assert strip_disfluencies("   ") == ""


def test_plain_text_is_untouched():
    assert strip_disfluencies("We planted corn every spring.") == "We planted corn every spring."
