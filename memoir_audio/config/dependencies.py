"""Startup wiring: build the provider registry from settings."""

from __future__ import annotations

import logging

from memoir_audio.services.assemblyai import AssemblyAITranscriber
from memoir_audio.services.auphonic import AuphonicClient
from memoir_audio.services.consent import ConsentGate
from memoir_audio.services.llm_client import BedrockLlmClient
from memoir_audio.services.rate_limit import SlidingWindowRateLimiter
from memoir_audio.services.registry import ProviderRegistry
from memoir_audio.services.temp_files import TempFileManager
from memoir_audio.services.transcribe import AmazonTranscribeService

from .settings import Settings

logger = logging.getLogger(__name__)


def build_provider_registry(config: Settings) -> ProviderRegistry:
    """Create every provider client once; handlers receive the same instance."""

    rate_limiter = None
    if config.rate_limit.enabled:
        rate_limiter = SlidingWindowRateLimiter(
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.window_seconds,
        )

    registry = ProviderRegistry(
        primary_stt=AssemblyAITranscriber.from_config(config.assemblyai),
        secondary_stt=AmazonTranscribeService.from_config(config.transcribe),
        llm=BedrockLlmClient(config.bedrock),
        temp_files=TempFileManager(config.pipeline.staging_dir),
        consent=ConsentGate(config.security.ai_consent_denied_users),
        rate_limiter=rate_limiter,
        auphonic=AuphonicClient.from_config(config.auphonic),
    )
    logger.info(
        "Provider registry ready primary=%s secondary=%s cleanup=%s rate_limit=%s",
        registry.primary_stt.provider_id,
        registry.secondary_stt.provider_id,
        "enabled" if registry.auphonic else "disabled",
        "enabled" if rate_limiter else "disabled",
    )
    return registry


__all__ = ["build_provider_registry"]
