"""Diagnostic endpoint comparing transcription pipelines on one recording."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from memoir_audio.config.settings import settings
from memoir_audio.controllers.dependencies import (
    RegistryDep,
    cleanup_orchestrator,
    rate_limited,
    transcription_pipeline,
)
from memoir_audio.pipelines.audio import (
    ComparisonHarness,
    ComparisonPath,
    cleanup_path,
    read_request_audio,
    transcription_path,
)
from memoir_audio.services.registry import ProviderRegistry
from memoir_audio.utils import CallerIdentity
from memoir_audio.views import ComparisonResponse

router = APIRouter(tags=["comparison"])

logger = logging.getLogger(__name__)

_CALLER = Depends(rate_limited("compare"))


def build_comparison_paths(registry: ProviderRegistry, include_cleanup: bool) -> list[ComparisonPath]:
    """pathA primary, pathB secondary, optional pathC cutter cleanup then primary."""

    timeout = settings.pipeline.comparison_timeout_seconds
    paths = [
        transcription_path(
            "pathA",
            f"Path A: {registry.primary_stt.provider_id}",
            transcription_pipeline(registry, "primary"),
            timeout,
        ),
        transcription_path(
            "pathB",
            f"Path B: {registry.secondary_stt.provider_id}",
            transcription_pipeline(registry, "secondary"),
            timeout,
        ),
    ]
    if include_cleanup:
        paths.append(
            cleanup_path(
                "pathC",
                f"Path C: auphonic cutter + {registry.primary_stt.provider_id}",
                cleanup_orchestrator(registry),
                transcription_pipeline(registry, "primary"),
                settings.pipeline.comparison_cleanup_timeout_seconds,
            )
        )
    return paths


@router.post("/compare", response_model=ComparisonResponse)
async def compare_pipelines(
    request: Request,
    registry: RegistryDep,
    caller: Annotated[CallerIdentity, _CALLER],
    include_cleanup: bool = Query(False, alias="includeCleanup"),
) -> ComparisonResponse:
    """Run every pipeline concurrently and report timing, cost and quality per path."""

    paths = build_comparison_paths(registry, include_cleanup)
    asset = await read_request_audio(request, settings.pipeline.max_transcribe_bytes)
    logger.info(
        "Comparison requested user=%s paths=%s bytes=%s",
        caller.user_id,
        [path.name for path in paths],
        asset.size_bytes,
    )

    report = await ComparisonHarness(paths).run(asset)
    return ComparisonResponse.from_report(report)
