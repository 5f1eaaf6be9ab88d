"""
Prometheus metrics for inkmatch.

All collectors register on the private ``REGISTRY`` served at ``/metrics``.
"""

from threading import Lock
from time import monotonic
from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "inkmatch_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

http_requests_total = Counter(
    "inkmatch_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "inkmatch_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "inkmatch_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "inkmatch_errors_total",
    "Service operation errors by type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

# Scrapes within this window reuse the last rendered payload.
_CACHE_TTL_SECONDS = 1.0


class PrometheusMetrics:
    """Records request/service metrics and renders the exposition payload."""

    _cache_lock: Lock = Lock()
    _cache_payload: Optional[bytes] = None
    _cache_ts: Optional[float] = None

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}
        http_request_duration_seconds.labels(**labels).observe(duration)
        http_requests_total.labels(**labels).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record one @measure_operation sample.

        Args:
            service: Service class name (e.g. 'ProfileSearchService')
            operation: Method name (e.g. 'search_profiles')
            duration: Duration in seconds
            status: 'success' or 'error'
            error_type: Exception class name when status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def get_metrics() -> bytes:
        """Metrics in Prometheus text format, cached briefly between scrapes."""
        now = monotonic()
        with PrometheusMetrics._cache_lock:
            payload = PrometheusMetrics._cache_payload
            ts = PrometheusMetrics._cache_ts
            if payload is None or ts is None or (now - ts) > _CACHE_TTL_SECONDS:
                payload = cast(bytes, generate_latest(REGISTRY))
                PrometheusMetrics._cache_payload = payload
                PrometheusMetrics._cache_ts = now
        return payload

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)

    @staticmethod
    def _invalidate_cache() -> None:
        with PrometheusMetrics._cache_lock:
            PrometheusMetrics._cache_ts = None
            PrometheusMetrics._cache_payload = None


prometheus_metrics = PrometheusMetrics()
