"""Comparison harness: settle-all with per-path timeouts."""

from __future__ import annotations

import asyncio
import time

import pytest

from memoir_audio.errors import ProviderTimeoutError
from memoir_audio.pipelines.audio.comparison import (
    ComparisonHarness,
    ComparisonPath,
    TimedTask,
    settle_all_with_timeout,
    transcription_path,
)
from memoir_audio.pipelines.audio.enrichment import EnrichmentChain
from memoir_audio.pipelines.audio.flow import TranscriptionPipeline
from memoir_audio.pipelines.audio.types import AudioAsset

from .conftest import FakeLlm, FakeTranscriber


async def _value():
    return 42


async def _hang():
    await asyncio.sleep(3600)


async def _boom():
    raise RuntimeError("provider exploded")


@pytest.mark.asyncio
async def test_settle_all_reports_each_outcome_without_waiting_for_hung_task():
    started = time.perf_counter()

    settled = await settle_all_with_timeout(
        [
            TimedTask("fast", _value, 1.0),
            TimedTask("slow", _hang, 0.1),
            TimedTask("broken", _boom, 1.0),
        ]
    )

    assert time.perf_counter() - started < 2.0
    by_name = {item.name: item for item in settled}
    assert by_name["fast"].status == "success" and by_name["fast"].value == 42
    assert by_name["slow"].status == "timeout"
    assert by_name["slow"].error == "slow timed out after 0.1s"
    assert by_name["broken"].status == "error"
    assert by_name["broken"].error == "provider exploded"


def _pipeline(transcriber, temp_files, llm=None):
    return TranscriptionPipeline(transcriber, EnrichmentChain(llm or FakeLlm()), temp_files)


@pytest.mark.asyncio
async def test_harness_normalizes_paths_and_computes_difference(temp_files):
    primary = transcription_path(
        "assemblyai",
        "AssemblyAI + Bedrock",
        _pipeline(FakeTranscriber("assemblyai"), temp_files),
        timeout_seconds=5,
    )
    secondary = transcription_path(
        "transcribe",
        "Amazon Transcribe + Bedrock",
        _pipeline(FakeTranscriber("amazon-transcribe"), temp_files, FakeLlm(formatted="A different story entirely.")),
        timeout_seconds=5,
    )

    report = await ComparisonHarness([primary, secondary]).run(AudioAsset(data=b"x" * 2048))

    first = report.results["assemblyai"]
    second = report.results["transcribe"]
    assert first.status == "success" and second.status == "success"
    assert first.name == "AssemblyAI + Bedrock"
    assert first.quality.formatted == "Formatted story."
    assert first.quality.confidence == 0.93
    assert first.quality.word_count == 2
    assert set(first.quality.lessons) == {"practical", "emotional", "character"}
    assert first.difference_from_baseline is None
    assert 0 < second.difference_from_baseline <= 100
    assert report.file_size_bytes == 2048
    assert list(temp_files.base_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_harness_isolates_failed_and_timed_out_paths(temp_files):
    good = transcription_path("assemblyai", "AssemblyAI", _pipeline(FakeTranscriber(), temp_files), 5)
    failing = transcription_path(
        "transcribe",
        "Amazon Transcribe",
        _pipeline(FakeTranscriber("amazon-transcribe", error="quota exceeded"), temp_files),
        5,
    )

    async def never_finishes(asset):
        await asyncio.sleep(3600)

    hung = ComparisonPath(name="auphonic", label="Auphonic", runner=never_finishes, timeout_seconds=0.1)

    report = await ComparisonHarness([good, failing, hung]).run(AudioAsset(data=b"x" * 100))

    assert report.results["assemblyai"].status == "success"
    assert report.results["transcribe"].status == "error"
    assert report.results["transcribe"].error
    assert report.results["transcribe"].difference_from_baseline is None
    assert report.results["auphonic"].status == "timeout"
    assert report.results["auphonic"].error == "auphonic timed out after 0.1s"


@pytest.mark.asyncio
async def test_exhausted_poll_budget_is_reported_as_timeout():
    async def cleanup_never_finishes():
        raise ProviderTimeoutError("auphonic", "Auphonic processing timed out after 36 status checks")

    settled = await settle_all_with_timeout([TimedTask("pathC", cleanup_never_finishes, 5.0)])

    assert settled[0].status == "timeout"
    assert settled[0].error == "Auphonic processing timed out after 36 status checks"
