"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Reservation metrics
reservation_attempts = Counter(
    'reservation_attempts_total',
    'Total sheet reservation attempts',
    ['status']  # success, sold_out, error
)

reservation_cancellations = Counter(
    'reservation_cancellations_total',
    'Total reservations canceled'
)

# Event view metrics
event_view_latency = Histogram(
    'event_view_latency_seconds',
    'Time spent computing a single event availability view',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Authentication metrics
login_attempts = Counter(
    'login_attempts_total',
    'Login attempts',
    ['principal', 'result']  # user/administrator, success/failure
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation_attempt(status: str):
    """Record reservation attempt. Status: success, sold_out, error"""
    reservation_attempts.labels(status=status).inc()


def record_cancellation():
    reservation_cancellations.inc()


def record_login(principal: str, success: bool):
    """Record a login decision for a user or an administrator."""
    result = "success" if success else "failure"
    login_attempts.labels(principal=principal, result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
