"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'seat_booking_attempts_total',
    'Total seat booking attempts',
    ['status']  # success, seat_not_found, seat_occupied
)

booking_latency = Histogram(
    'seat_booking_latency_seconds',
    'Time spent inside the partition processing a booking',
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5]
)

# Partition metrics
active_partitions = Gauge(
    'seat_partitions_active',
    'Number of flight partitions loaded in this process'
)

# Subscriber metrics
open_subscribers = Gauge(
    'seat_subscribers_open',
    'Number of open live subscriber connections'
)

broadcast_deliveries = Counter(
    'seat_broadcast_deliveries_total',
    'Snapshot deliveries to live subscribers',
    ['result']  # delivered, failed
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, seat_not_found, seat_occupied"""
    booking_attempts.labels(status=status).inc()

def record_delivery(delivered: bool):
    """Record a single snapshot delivery to one subscriber."""
    result = "delivered" if delivered else "failed"
    broadcast_deliveries.labels(result=result).inc()
