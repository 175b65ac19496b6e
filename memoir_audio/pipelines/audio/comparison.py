"""Side-by-side comparison of independent audio pipelines.

Each path is bounded by its own timeout and all paths settle before the
report is assembled, so a slow or failing path never delays or fails the
others. Nothing here persists data; the report is diagnostic only.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from memoir_audio.errors import ProviderTimeoutError
from memoir_audio.telemetry import increment_comparison_outcome

from . import costs
from .flow import PipelineRun, TranscriptionPipeline
from .production import AudioCleanupOrchestrator
from .types import (
    AudioAsset,
    CostBreakdown,
    PathQuality,
    PathStatus,
    PipelinePath,
    TimingBreakdown,
)

logger = logging.getLogger("memoir_audio.pipeline")

T = TypeVar("T")


@dataclass(frozen=True)
class TimedTask(Generic[T]):
    name: str
    factory: Callable[[], Awaitable[T]]
    timeout_seconds: float


@dataclass(frozen=True)
class Settled(Generic[T]):
    name: str
    status: PathStatus
    elapsed_ms: int
    value: Optional[T] = None
    error: Optional[str] = None


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def _settle(task: TimedTask[T]) -> Settled[T]:
    started = time.perf_counter()
    try:
        value = await asyncio.wait_for(task.factory(), timeout=task.timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("Comparison path %s timed out after %ss", task.name, task.timeout_seconds)
        return Settled(
            name=task.name,
            status="timeout",
            elapsed_ms=_elapsed_ms(started),
            error=f"{task.name} timed out after {task.timeout_seconds:g}s",
        )
    except ProviderTimeoutError as exc:
        logger.warning("Comparison path %s exhausted its provider budget: %s", task.name, exc.message)
        return Settled(
            name=task.name,
            status="timeout",
            elapsed_ms=_elapsed_ms(started),
            error=exc.message,
        )
    except Exception as exc:
        logger.warning("Comparison path %s failed: %s", task.name, exc)
        return Settled(
            name=task.name,
            status="error",
            elapsed_ms=_elapsed_ms(started),
            error=str(exc) or type(exc).__name__,
        )
    return Settled(name=task.name, status="success", elapsed_ms=_elapsed_ms(started), value=value)


async def settle_all_with_timeout(tasks: Sequence[TimedTask[T]]) -> list[Settled[T]]:
    """Run every task concurrently; each ends in success, error or timeout."""

    return list(await asyncio.gather(*(_settle(task) for task in tasks)))


@dataclass(frozen=True)
class PathOutcome:
    """What one comparison path produced, before normalization."""

    run: PipelineRun
    cleanup_ms: int = 0
    cleanup_cost: float = 0.0


PathRunner = Callable[[AudioAsset], Awaitable[PathOutcome]]


@dataclass(frozen=True)
class ComparisonPath:
    name: str
    label: str
    runner: PathRunner
    timeout_seconds: float


@dataclass
class ComparisonReport:
    test_total_ms: int
    file_size_bytes: int
    estimated_duration_minutes: float
    results: dict[str, PipelinePath] = field(default_factory=dict)


def transcription_path(
    name: str,
    label: str,
    pipeline: TranscriptionPipeline,
    timeout_seconds: float,
) -> ComparisonPath:
    async def runner(asset: AudioAsset) -> PathOutcome:
        return PathOutcome(run=await pipeline.run(asset))

    return ComparisonPath(name=name, label=label, runner=runner, timeout_seconds=timeout_seconds)


def cleanup_path(
    name: str,
    label: str,
    orchestrator: AudioCleanupOrchestrator,
    pipeline: TranscriptionPipeline,
    timeout_seconds: float,
) -> ComparisonPath:
    """Cutter cleanup first, then transcribe and enrich the cleaned mp3."""

    async def runner(asset: AudioAsset) -> PathOutcome:
        cleaned = await orchestrator.run(asset, mode="cutter")
        run = await pipeline.run(AudioAsset(data=cleaned.audio, content_type="audio/mpeg"))
        return PathOutcome(
            run=run,
            cleanup_ms=cleaned.total_ms,
            cleanup_cost=costs.cleanup_cost(asset.size_bytes),
        )

    return ComparisonPath(name=name, label=label, runner=runner, timeout_seconds=timeout_seconds)


def _success_path(path: ComparisonPath, outcome: PathOutcome, elapsed_ms: int) -> PipelinePath:
    run = outcome.run
    timing = TimingBreakdown(
        transcription_ms=run.timing.transcription_ms,
        formatting_ms=run.timing.formatting_ms,
        lesson_extraction_ms=run.timing.lesson_extraction_ms,
        cleanup_ms=outcome.cleanup_ms,
        total_ms=elapsed_ms,
    )
    cost = CostBreakdown(
        transcription=run.cost.transcription,
        formatting=run.cost.formatting,
        lesson_extraction=run.cost.lesson_extraction,
        cleanup=outcome.cleanup_cost,
    )
    quality = PathQuality(
        transcription=run.transcription.raw_text,
        formatted=run.story.formatted_text,
        lessons=run.story.lesson_options.as_dict(),
        word_count=costs.count_words(run.story.formatted_text),
        confidence=run.transcription.confidence,
    )
    return PipelinePath(name=path.label, status="success", timing=timing, cost=cost, quality=quality)


def _failed_path(path: ComparisonPath, settled: Settled[PathOutcome]) -> PipelinePath:
    return PipelinePath(
        name=path.label,
        status=settled.status,
        timing=TimingBreakdown(total_ms=settled.elapsed_ms),
        error=settled.error or "Unknown error",
    )


class ComparisonHarness:
    """Run comparison paths over one asset and normalize their outcomes."""

    def __init__(self, paths: Sequence[ComparisonPath]) -> None:
        self.paths = list(paths)

    async def run(self, asset: AudioAsset, paths: Sequence[ComparisonPath] | None = None) -> ComparisonReport:
        selected = list(paths) if paths is not None else self.paths
        started = time.perf_counter()

        def make_factory(path: ComparisonPath) -> Callable[[], Awaitable[PathOutcome]]:
            return lambda: path.runner(asset)

        settled = await settle_all_with_timeout(
            [TimedTask(path.name, make_factory(path), path.timeout_seconds) for path in selected]
        )

        results: dict[str, PipelinePath] = {}
        for path, outcome in zip(selected, settled):
            if outcome.status == "success" and outcome.value is not None:
                results[path.name] = _success_path(path, outcome.value, outcome.elapsed_ms)
            else:
                results[path.name] = _failed_path(path, outcome)
            increment_comparison_outcome(path.name, outcome.status)

        baseline = results.get(selected[0].name) if selected else None
        if baseline is not None and baseline.status == "success":
            for path in selected[1:]:
                candidate = results[path.name]
                if candidate.status == "success":
                    candidate.difference_from_baseline = costs.text_difference_percent(
                        baseline.quality.formatted,
                        candidate.quality.formatted,
                    )

        report = ComparisonReport(
            test_total_ms=_elapsed_ms(started),
            file_size_bytes=asset.size_bytes,
            estimated_duration_minutes=asset.duration_minutes,
            results=results,
        )
        logger.info(
            "Comparison complete total_ms=%s %s",
            report.test_total_ms,
            " ".join(f"{name}={path.status}" for name, path in results.items()),
        )
        return report


__all__ = [
    "ComparisonHarness",
    "ComparisonPath",
    "ComparisonReport",
    "PathOutcome",
    "Settled",
    "TimedTask",
    "cleanup_path",
    "settle_all_with_timeout",
    "transcription_path",
]
