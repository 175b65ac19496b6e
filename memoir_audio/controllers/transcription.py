"""Speech-to-text endpoint.

See `memoir_audio.pipelines.audio.flow.TranscriptionPipeline` for the
stage map. The POST `/transcribe` handler performs:

1. Auth, AI consent and rate limiting (dependencies).
2. Ingestion of a multipart `audio` field or a base64 JSON body.
3. Transcription with the selected provider, then enrichment.
"""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request

from memoir_audio.config.settings import settings
from memoir_audio.controllers.dependencies import (
    RegistryDep,
    rate_limited,
    transcription_pipeline,
)
from memoir_audio.pipelines.audio import TranscriptionPipeline, read_request_audio
from memoir_audio.utils import CallerIdentity
from memoir_audio.views import TranscriptionResponse

router = APIRouter(tags=["transcription"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(TranscriptionPipeline.describe())

_CALLER = Depends(rate_limited("transcribe"))


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(
    request: Request,
    registry: RegistryDep,
    caller: Annotated[CallerIdentity, _CALLER],
    provider: Literal["primary", "secondary"] = Query("primary"),
) -> TranscriptionResponse:
    """Transcribe an uploaded recording and return the formatted story with lesson options."""

    asset = await read_request_audio(request, settings.pipeline.max_transcribe_bytes)
    logger.info(
        "Transcription requested user=%s provider=%s bytes=%s",
        caller.user_id,
        provider,
        asset.size_bytes,
    )

    run = await transcription_pipeline(registry, provider).run(asset)
    return TranscriptionResponse.from_run(run, asset.size_bytes)
