"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Registration metrics
registrations_created = Counter(
    'registrations_created_total',
    'Registrations written to the store',
    ['source']  # form, shared_link
)

# Ticket verification metrics
ticket_scans = Counter(
    'ticket_scans_total',
    'Ticket scan outcomes',
    ['status']  # success, error, not_found
)

ticket_scan_latency = Histogram(
    'ticket_scan_latency_seconds',
    'Ticket verification latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Integration metrics
slug_generations = Counter(
    'slug_generations_total',
    'Slug generation attempts',
    ['method']  # remote, fallback
)

emails_sent = Counter(
    'emails_sent_total',
    'Transactional email attempts',
    ['kind', 'result']  # ticket/welcome, success/failure
)

image_uploads = Counter(
    'image_uploads_total',
    'Image uploads forwarded to the image host',
    ['result']  # success, failure
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

# Convenience functions for instrumentation
def record_registration(source: str):
    """Record a registration write. Source: form, shared_link"""
    registrations_created.labels(source=source).inc()

def record_scan(status: str):
    """Record ticket scan outcome. Status: success, error, not_found"""
    ticket_scans.labels(status=status).inc()

def record_slug_generation(method: str):
    slug_generations.labels(method=method).inc()

def record_email(kind: str, success: bool):
    result = "success" if success else "failure"
    emails_sent.labels(kind=kind, result=result).inc()

def record_upload(success: bool):
    result = "success" if success else "failure"
    image_uploads.labels(result=result).inc()

def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
