"""
Prometheus metrics for monitoring
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST  # noqa: F401

# ==================== Booking Metrics ====================

bookings_created_total = Counter(
    'bookings_created_total',
    'Total bookings created',
    ['cabin_class']
)

booking_creation_duration_seconds = Histogram(
    'booking_creation_duration_seconds',
    'Time to create a booking',
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0]
)

pnr_collisions_total = Counter(
    'pnr_collisions_total',
    'Booking reference draws that hit an existing reference'
)

receipt_notifications_total = Counter(
    'receipt_notifications_total',
    'Receipt notifications attempted',
    ['result']  # sent, failed, skipped
)

# ==================== Inventory Metrics ====================

flight_seats_seeded_total = Counter(
    'flight_seats_seeded_total',
    'Occupancy rows inserted',
    ['source']  # flight, seat, reconcile
)

reconcile_failures_total = Counter(
    'reconcile_failures_total',
    'Flights skipped by reconciliation because of an error'
)

# ==================== Helper Functions ====================

def record_seeded(source: str, count: int):
    if count > 0:
        flight_seats_seeded_total.labels(source=source).inc(count)


def get_metrics():
    """Get current metrics in Prometheus format"""
    return generate_latest()
