"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
        120.0,
        180.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

PROVIDER_LATENCY = Histogram(
    "provider_call_duration_seconds",
    "Duration of calls to external audio and language-model providers",
    ("provider", "operation", "outcome"),
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
)

ENRICHMENT_FALLBACKS = Counter(
    "enrichment_fallbacks_total",
    "Enrichment sub-calls replaced with safe defaults",
    ("stage", "reason"),
)

CLEANUP_POLL_ATTEMPTS = Histogram(
    "cleanup_poll_attempts",
    "Status polls needed before an enhancement job reached a terminal state",
    ("outcome",),
    buckets=(1, 2, 4, 8, 12, 18, 24, 30, 36, 48),
)

COMPARISON_OUTCOMES = Counter(
    "comparison_path_outcomes_total",
    "Outcomes of pipelines raced by the comparison harness",
    ("path", "status"),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_provider_call(
    provider: str,
    operation: str,
    duration_seconds: float,
    *,
    success: bool,
) -> None:
    PROVIDER_LATENCY.labels(
        provider=provider,
        operation=operation,
        outcome="success" if success else "error",
    ).observe(max(duration_seconds, 0))


def increment_enrichment_fallback(stage: str, reason: str) -> None:
    ENRICHMENT_FALLBACKS.labels(stage=stage, reason=reason).inc()


def observe_poll_attempts(outcome: str, attempts: int) -> None:
    CLEANUP_POLL_ATTEMPTS.labels(outcome=outcome).observe(attempts)


def increment_comparison_outcome(path: str, status: str) -> None:
    COMPARISON_OUTCOMES.labels(path=path, status=status).inc()
