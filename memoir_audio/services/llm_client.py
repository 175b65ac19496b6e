"""Thin Bedrock client wrapper for language-model invocations."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, Optional, Protocol

from fastapi.concurrency import run_in_threadpool

from memoir_audio.config.settings import BedrockConfig
from memoir_audio.services.aws import create_boto3_client
from memoir_audio.telemetry import observe_provider_call

logger = logging.getLogger(__name__)


class LlmInvocationError(RuntimeError):
    """Raised when the Bedrock invocation fails or returns no text."""


class LanguageModelClient(Protocol):
    """Chat-completion contract consumed by the enrichment chain."""

    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str: ...


def _decode_bedrock_api_key(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode the BEDROCK_API_KEY secret into access/secret key components."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip())
    except (binascii.Error, ValueError):
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    return access_key, secret_key


class BedrockLlmClient:
    """Invoke Amazon Bedrock models with standard configuration."""

    provider_id = "bedrock"

    def __init__(self, config: BedrockConfig, client: Any | None = None) -> None:
        self._config = config
        self._model_id = config.model_id

        if client is not None:
            self._client = client
            return

        api_key_tuple = None
        if config.api_key:
            api_key_tuple = _decode_bedrock_api_key(config.api_key.get_secret_value())

        self._client = create_boto3_client(
            "bedrock-runtime",
            region_name=config.region,
            aws_access_key_id=api_key_tuple[0] if api_key_tuple else None,
            aws_secret_access_key=api_key_tuple[1] if api_key_tuple else None,
            read_timeout=config.read_timeout_seconds,
            max_attempts=config.max_attempts,
        )

    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        top_p: float | None = None,
        model_id: str | None = None,
    ) -> str:
        """Run a Bedrock `converse` call and return the aggregate text output."""

        target_model_id = model_id or self._model_id
        inference_cfg = {
            "maxTokens": max_tokens or self._config.max_tokens,
            "temperature": (
                temperature
                if temperature is not None
                else self._config.temperature
            ),
            "topP": top_p if top_p is not None else self._config.top_p,
        }

        def _call() -> str:
            response = self._client.converse(
                modelId=target_model_id,
                system=[{"text": system_prompt}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig=inference_cfg,
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        started = time.perf_counter()
        try:
            result = await run_in_threadpool(_call)
        except Exception as exc:  # pragma: no cover - external dependency
            observe_provider_call(self.provider_id, "converse", time.perf_counter() - started, success=False)
            raise LlmInvocationError(str(exc)) from exc

        observe_provider_call(self.provider_id, "converse", time.perf_counter() - started, success=True)
        if not result:
            raise LlmInvocationError("Bedrock returned an empty completion.")
        return result


__all__ = ["BedrockLlmClient", "LanguageModelClient", "LlmInvocationError"]
