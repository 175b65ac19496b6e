"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated, Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from memoir_audio.config.settings import settings
from memoir_audio.errors import AuthError
from memoir_audio.pipelines.audio import (
    AudioCleanupOrchestrator,
    EnrichmentChain,
    TranscriptionPipeline,
)
from memoir_audio.services.registry import ProviderChoice, ProviderRegistry
from memoir_audio.services.rate_limit import rate_limit_key
from memoir_audio.utils import AuthenticationError, CallerIdentity, identity_from_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_registry(request: Request) -> ProviderRegistry:
    """Return the registry built at startup."""

    return request.app.state.registry


RegistryDep = Annotated[ProviderRegistry, Depends(get_registry)]


async def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> CallerIdentity:
    """Resolve and validate the caller referenced by the bearer token."""

    if credentials is None or not credentials.credentials:
        raise AuthError("Authentication required")
    try:
        return identity_from_token(credentials.credentials)
    except AuthenticationError:
        raise AuthError("Invalid authentication") from None


CurrentCallerDep = Annotated[CallerIdentity, Depends(get_current_caller)]


async def require_ai_consent(caller: CurrentCallerDep, registry: RegistryDep) -> CallerIdentity:
    registry.consent.ensure_allowed(caller.user_id, caller.ai_processing_enabled)
    return caller


ConsentedCallerDep = Annotated[CallerIdentity, Depends(require_ai_consent)]


def client_ip(request: Request) -> str:
    """First ``X-Forwarded-For`` hop, then ``X-Real-IP``, then the socket peer."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def rate_limited(route: str) -> Callable[..., Awaitable[CallerIdentity]]:
    """Build a dependency that charges one request to the caller's window."""

    async def dependency(
        request: Request,
        caller: ConsentedCallerDep,
        registry: RegistryDep,
    ) -> CallerIdentity:
        if registry.rate_limiter is not None:
            key = rate_limit_key(route, user_id=caller.user_id, client_ip=client_ip(request))
            registry.rate_limiter.hit(key)
        return caller

    return dependency


def transcription_pipeline(registry: ProviderRegistry, choice: ProviderChoice = "primary") -> TranscriptionPipeline:
    return TranscriptionPipeline(
        registry.transcriber(choice),
        EnrichmentChain(registry.llm),
        registry.temp_files,
        llm_input_cost_per_million=settings.pipeline.llm_input_cost_per_million,
        llm_output_cost_per_million=settings.pipeline.llm_output_cost_per_million,
    )


def cleanup_orchestrator(registry: ProviderRegistry) -> AudioCleanupOrchestrator:
    return AudioCleanupOrchestrator.from_config(registry.require_auphonic(), settings.auphonic)


__all__ = [
    "ConsentedCallerDep",
    "CurrentCallerDep",
    "RegistryDep",
    "bearer_scheme",
    "cleanup_orchestrator",
    "client_ip",
    "get_current_caller",
    "get_registry",
    "rate_limited",
    "require_ai_consent",
    "transcription_pipeline",
]
