"""Telemetry helpers and metrics."""

from .metrics import (
    CLEANUP_POLL_ATTEMPTS,
    COMPARISON_OUTCOMES,
    ENRICHMENT_FALLBACKS,
    ERROR_COUNTER,
    PROVIDER_LATENCY,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    increment_comparison_outcome,
    increment_enrichment_fallback,
    observe_poll_attempts,
    observe_provider_call,
    observe_request,
)

__all__ = [
    "CLEANUP_POLL_ATTEMPTS",
    "COMPARISON_OUTCOMES",
    "ENRICHMENT_FALLBACKS",
    "ERROR_COUNTER",
    "PROVIDER_LATENCY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "increment_comparison_outcome",
    "increment_enrichment_fallback",
    "observe_poll_attempts",
    "observe_provider_call",
    "observe_request",
]
