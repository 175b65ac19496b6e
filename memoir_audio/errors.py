"""Error taxonomy shared by controllers and pipelines.

Every error carries an HTTP status and a message that is safe to show to the
caller. Provider payloads stay in the logs; the exception handler in
``memoir_audio.main`` renders ``{"error": message}`` only.
"""

from __future__ import annotations

from typing import Mapping


class PipelineError(Exception):
    """Base class for request-fatal errors raised by the audio pipelines."""

    status_code = 500

    def __init__(self, message: str, *, headers: Mapping[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.headers = dict(headers or {})


class AuthError(PipelineError):
    """Missing or invalid caller identity."""

    status_code = 401


class ConsentError(PipelineError):
    """The caller has not consented to AI processing."""

    status_code = 403


class RateLimitError(PipelineError):
    """The caller exceeded its request allowance."""

    status_code = 429

    def __init__(
        self,
        message: str,
        *,
        retry_after: int,
        limit: int,
        remaining: int = 0,
    ) -> None:
        super().__init__(
            message,
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": str(remaining),
            },
        )
        self.retry_after = retry_after


class AudioValidationError(PipelineError):
    """The uploaded audio is missing, empty, unsupported or oversized."""

    status_code = 400


class ProviderError(PipelineError):
    """An upstream provider call failed."""

    status_code = 502

    def __init__(self, provider: str, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status


class ProviderTimeoutError(PipelineError):
    """An upstream job never reached a terminal state within its budget.

    Not a :class:`ProviderError`: a slow job and a failed job are reported
    with different statuses.
    """

    status_code = 504

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class ServiceUnavailableError(PipelineError):
    """A required provider integration is not configured."""

    status_code = 503


__all__ = [
    "PipelineError",
    "AuthError",
    "ConsentError",
    "RateLimitError",
    "AudioValidationError",
    "ProviderError",
    "ProviderTimeoutError",
    "ServiceUnavailableError",
]
