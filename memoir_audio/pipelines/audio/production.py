"""Audio cleanup stage: drive one enhancement production to a terminal state.

``create -> upload -> start -> poll -> download``. Every step before polling
is fatal on a non-success response. Polling sleeps only between attempts, so
a production that never finishes ends after ``max_poll_attempts`` fetches and
raises :class:`ProviderTimeoutError` instead of :class:`ProviderError`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from memoir_audio.config.settings import AuphonicConfig
from memoir_audio.errors import ProviderError, ProviderTimeoutError
from memoir_audio.services.auphonic import (
    PROVIDER_ID,
    AuphonicClient,
    CleanupMode,
    OutputFile,
    ProductionReport,
    ProductionStatus,
    build_production_config,
)
from memoir_audio.telemetry import observe_poll_attempts

from .types import AudioAsset

logger = logging.getLogger("memoir_audio.pipeline")

Sleep = Callable[[float], Awaitable[None]]


class JobState(str, Enum):
    CREATED = "created"
    UPLOADED = "uploaded"
    STARTED = "started"
    POLLING = "polling"
    DONE = "done"
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass
class ProductionJob:
    """Local view of one remote production."""

    id: str
    mode: CleanupMode
    state: JobState = JobState.CREATED
    status: ProductionStatus = "waiting"
    status_label: str = ""
    outputs: tuple[OutputFile, ...] = field(default_factory=tuple)
    error_message: Optional[str] = None
    poll_attempts: int = 0

    def apply(self, report: ProductionReport) -> None:
        self.status = report.status
        self.status_label = report.status_label
        self.outputs = report.outputs
        if report.status == "error":
            self.state = JobState.ERROR
            self.error_message = report.error_detail
        elif report.status == "done":
            self.state = JobState.DONE

    def mp3_output(self) -> OutputFile | None:
        for output in self.outputs:
            if output.format == "mp3" and output.download_url:
                return output
        return None


@dataclass(frozen=True)
class CleanupOutcome:
    audio: bytes
    production_id: str
    status_label: str
    create_ms: int
    poll_ms: int
    download_ms: int
    total_ms: int
    poll_attempts: int

    @property
    def size_bytes(self) -> int:
        return len(self.audio)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class AudioCleanupOrchestrator:
    """State machine over the enhancement provider's production API."""

    def __init__(
        self,
        client: AuphonicClient,
        *,
        poll_interval_seconds: float = 5.0,
        max_poll_attempts: int = 36,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        self._client = client
        self._poll_interval = poll_interval_seconds
        self._max_attempts = max_poll_attempts
        self._sleep = sleep

    @classmethod
    def from_config(cls, client: AuphonicClient, config: AuphonicConfig) -> "AudioCleanupOrchestrator":
        return cls(
            client,
            poll_interval_seconds=config.poll_interval_seconds,
            max_poll_attempts=config.max_poll_attempts,
        )

    @property
    def poll_budget_seconds(self) -> float:
        return self._max_attempts * self._poll_interval

    async def create(self, mode: CleanupMode = "cleaner", preset: str | None = None) -> ProductionJob:
        production_id = await self._client.create_production(build_production_config(mode, preset))
        logger.info("Cleanup production created id=%s mode=%s preset=%s", production_id, mode, preset)
        return ProductionJob(id=production_id, mode=mode)

    async def upload(self, job: ProductionJob, asset: AudioAsset) -> None:
        await self._client.upload(
            job.id,
            asset.data,
            filename=f"audio{asset.suffix}",
            content_type=asset.content_type,
        )
        job.state = JobState.UPLOADED
        logger.info("Cleanup production uploaded id=%s bytes=%s", job.id, asset.size_bytes)

    async def start(self, job: ProductionJob) -> None:
        await self._client.start(job.id)
        job.state = JobState.STARTED
        logger.info("Cleanup production started id=%s", job.id)

    async def poll(self, job: ProductionJob) -> ProductionReport:
        """Fetch status until the production is done or failed.

        Raises:
            ProviderError: The provider reported an error field.
            ProviderTimeoutError: No terminal state within the poll budget.
        """

        job.state = JobState.POLLING
        for attempt in range(1, self._max_attempts + 1):
            report = await self._client.get_status(job.id)
            job.poll_attempts = attempt
            job.apply(report)
            logger.info(
                "Cleanup poll %s/%s id=%s code=%s label=%s status=%s",
                attempt,
                self._max_attempts,
                job.id,
                report.status_code,
                report.status_label,
                report.status,
            )

            if report.status == "error":
                observe_poll_attempts("error", attempt)
                logger.error("Cleanup production failed id=%s: %s", job.id, report.error_detail)
                raise ProviderError(PROVIDER_ID, "Auphonic processing failed")
            if report.status == "done":
                observe_poll_attempts("done", attempt)
                return report

            if attempt < self._max_attempts:
                await self._sleep(self._poll_interval)

        job.state = JobState.TIMEOUT
        observe_poll_attempts("timeout", self._max_attempts)
        logger.error("Cleanup production timed out id=%s attempts=%s", job.id, self._max_attempts)
        raise ProviderTimeoutError(
            PROVIDER_ID,
            f"Auphonic processing timed out after {self._max_attempts} status checks",
        )

    async def download(self, job: ProductionJob) -> bytes:
        output = job.mp3_output()
        if output is None:
            job.state = JobState.ERROR
            job.error_message = "No MP3 output file found in Auphonic production"
            raise ProviderError(PROVIDER_ID, job.error_message)
        return await self._client.download(output.download_url)

    async def run(
        self,
        asset: AudioAsset,
        mode: CleanupMode = "cleaner",
        preset: str | None = None,
    ) -> CleanupOutcome:
        started = time.perf_counter()

        create_started = time.perf_counter()
        job = await self.create(mode, preset)
        await self.upload(job, asset)
        await self.start(job)
        create_ms = _elapsed_ms(create_started)

        poll_started = time.perf_counter()
        await self.poll(job)
        poll_ms = _elapsed_ms(poll_started)

        download_started = time.perf_counter()
        audio = await self.download(job)
        download_ms = _elapsed_ms(download_started)

        outcome = CleanupOutcome(
            audio=audio,
            production_id=job.id,
            status_label=job.status_label,
            create_ms=create_ms,
            poll_ms=poll_ms,
            download_ms=download_ms,
            total_ms=_elapsed_ms(started),
            poll_attempts=job.poll_attempts,
        )
        logger.info(
            "Cleanup complete id=%s original_bytes=%s cleaned_bytes=%s total_ms=%s",
            job.id,
            asset.size_bytes,
            outcome.size_bytes,
            outcome.total_ms,
        )
        return outcome


__all__ = [
    "AudioCleanupOrchestrator",
    "CleanupOutcome",
    "JobState",
    "ProductionJob",
]
