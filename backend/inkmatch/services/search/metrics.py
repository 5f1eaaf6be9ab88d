# backend/inkmatch/services/search/metrics.py
"""
Prometheus metrics for profile search.

Provides observability for:
- Search latency by stage (compile, fetch, count, total)
- Result counts and zero-result searches
- Values clamped during normalization
- Store failures surfaced as SearchExecutionError
"""
from __future__ import annotations

from typing import Dict, Iterable

from prometheus_client import Counter, Histogram

from inkmatch.monitoring.prometheus_metrics import REGISTRY, PrometheusMetrics

SEARCH_LATENCY = Histogram(
    "inkmatch_profile_search_latency_ms",
    "Profile search latency in milliseconds",
    ["stage", "mode"],
    registry=REGISTRY,
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000],
)

SEARCH_RESULT_COUNT = Histogram(
    "inkmatch_profile_search_result_count",
    "Total matching profiles per search",
    registry=REGISTRY,
    buckets=[0, 1, 5, 12, 25, 50, 100, 500],
)

SEARCH_ZERO_RESULTS = Counter(
    "inkmatch_profile_search_zero_results_total",
    "Searches that matched no profiles",
    ["has_filters"],
    registry=REGISTRY,
)

FILTER_NORMALIZATIONS = Counter(
    "inkmatch_profile_search_normalizations_total",
    "Out-of-domain filter values clamped before compilation",
    ["field"],
    registry=REGISTRY,
)

SEARCH_FAILURES = Counter(
    "inkmatch_profile_search_failures_total",
    "Searches that failed at the store boundary",
    ["stage"],
    registry=REGISTRY,
)

SEARCH_REQUESTS = Counter(
    "inkmatch_profile_search_requests_total",
    "Total profile searches",
    ["status"],
    registry=REGISTRY,
)


def record_search_metrics(
    total_latency_ms: float,
    stage_latencies: Dict[str, float],
    mode: str,
    total_results: int,
    has_filters: bool,
) -> None:
    """Record all metrics for one successful search."""
    SEARCH_LATENCY.labels(stage="total", mode=mode).observe(total_latency_ms)
    for stage, latency in stage_latencies.items():
        SEARCH_LATENCY.labels(stage=stage, mode=mode).observe(latency)

    SEARCH_RESULT_COUNT.observe(total_results)
    if total_results == 0:
        SEARCH_ZERO_RESULTS.labels(has_filters="true" if has_filters else "false").inc()

    status = "success" if total_results > 0 else "zero_results"
    SEARCH_REQUESTS.labels(status=status).inc()
    PrometheusMetrics._invalidate_cache()


def record_normalizations(fields: Iterable[str]) -> None:
    for field_name in fields:
        FILTER_NORMALIZATIONS.labels(field=field_name).inc()
    PrometheusMetrics._invalidate_cache()


def record_search_failure(stage: str) -> None:
    SEARCH_FAILURES.labels(stage=stage).inc()
    SEARCH_REQUESTS.labels(status="error").inc()
    PrometheusMetrics._invalidate_cache()


__all__ = [
    "SEARCH_LATENCY",
    "SEARCH_RESULT_COUNT",
    "SEARCH_ZERO_RESULTS",
    "FILTER_NORMALIZATIONS",
    "SEARCH_FAILURES",
    "SEARCH_REQUESTS",
    "record_search_metrics",
    "record_normalizations",
    "record_search_failure",
]
