"""Audio enhancement endpoint backed by the cleanup orchestrator."""

import logging
from dataclasses import replace
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request

from memoir_audio.config.settings import settings
from memoir_audio.controllers.dependencies import (
    RegistryDep,
    cleanup_orchestrator,
    rate_limited,
)
from memoir_audio.pipelines.audio import read_request_audio
from memoir_audio.services.auphonic import CleanupMode
from memoir_audio.utils import CallerIdentity
from memoir_audio.views import CleanupResponse

router = APIRouter(tags=["cleanup"])

logger = logging.getLogger(__name__)

_CALLER = Depends(rate_limited("clean"))


@router.post("/clean", response_model=CleanupResponse)
async def clean_audio(
    request: Request,
    registry: RegistryDep,
    caller: Annotated[CallerIdentity, _CALLER],
    mode: CleanupMode = Query("cleaner"),
    preset: Optional[str] = Query(None),
) -> CleanupResponse:
    """Run a cleaner or cutter production and return the enhanced mp3 as base64."""

    orchestrator = cleanup_orchestrator(registry)
    asset = await read_request_audio(request, settings.pipeline.max_clean_bytes)
    logger.info(
        "Cleanup requested user=%s mode=%s preset=%s bytes=%s",
        caller.user_id,
        mode,
        preset,
        asset.size_bytes,
    )

    async with registry.temp_files.stage(asset.data, asset.suffix) as staged:
        outcome = await orchestrator.run(replace(asset, path=staged.path), mode, preset)

    return CleanupResponse.from_outcome(outcome, asset.size_bytes)
