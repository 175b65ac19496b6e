"""Duration and cost heuristics."""

from __future__ import annotations

import pytest

from memoir_audio.pipelines.audio import costs
from memoir_audio.pipelines.audio.types import AudioAsset

HALF_MEGABYTE = 500 * 1024


def test_half_megabyte_is_about_half_a_minute_everywhere():
    minutes = costs.estimate_duration_minutes(HALF_MEGABYTE)

    assert minutes == pytest.approx(0.49, abs=0.01)
    assert AudioAsset(data=b"\0" * HALF_MEGABYTE).duration_minutes == minutes
    assert costs.estimate_duration_seconds(HALF_MEGABYTE) == 29
    assert costs.transcription_cost("assemblyai", HALF_MEGABYTE) == pytest.approx(minutes * 0.0025)
    assert costs.transcription_cost("amazon-transcribe", HALF_MEGABYTE) == pytest.approx(minutes * 0.024)
    assert costs.cleanup_cost(HALF_MEGABYTE) == pytest.approx(minutes * 11 / 540)


def test_unknown_provider_costs_nothing():
    assert costs.transcription_cost("mystery", 1024 * 1024) == 0.0


def test_formatting_cost_uses_token_heuristic():
    cost = costs.formatting_cost(100, input_rate_per_million=1.0, output_rate_per_million=1.0)

    # 150 + 1000 input tokens, 180 output tokens
    assert cost == pytest.approx(1330 / 1_000_000)


def test_lesson_cost_has_fixed_output_tokens():
    cost = costs.lesson_extraction_cost(100, input_rate_per_million=0.0, output_rate_per_million=1.0)

    assert cost == pytest.approx(200 / 1_000_000)


def test_empty_text_costs_nothing():
    assert costs.formatting_cost(0, input_rate_per_million=1.0, output_rate_per_million=1.0) == 0.0


def test_text_difference_percent_bounds():
    assert costs.text_difference_percent("same words", "same words") == 0
    assert costs.text_difference_percent("", "") == 0
    assert costs.text_difference_percent("aaaa", "bbbb") == 100


def test_count_words():
    assert costs.count_words("  one two\nthree ") == 3
