"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total reservation attempts',
    ['outcome']  # success or a BookingErrorCode value
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Reservation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

ticket_code_retries = Counter(
    'ticket_code_retries_total',
    'Reservation retries caused by ticket code collisions'
)

cancellations = Counter(
    'booking_cancellations_total',
    'Total cancellation attempts',
    ['outcome']  # cancelled, already_cancelled or a BookingErrorCode value
)

# Side effects
notification_failures = Counter(
    'notification_failures_total',
    'Notifications that could not be delivered',
    ['kind']  # booking_confirmed, booking_cancelled
)

cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get: hit/miss/error, set: ok/error, invalidate: ok/error
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    """Record reservation attempt. Outcome: success or an error code."""
    booking_attempts.labels(outcome=outcome).inc()


def record_cancellation(outcome: str):
    cancellations.labels(outcome=outcome).inc()


def record_notification_failure(kind: str):
    notification_failures.labels(kind=kind).inc()


def record_cache_operation(operation: str, result: str):
    """Record cache operation."""
    cache_operations.labels(operation=operation, result=result).inc()
