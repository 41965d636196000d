"""Prometheus metric definitions for the checkout service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


order_requests_total = Counter("order_requests_total", "Total create-order requests", ["service", "outcome"])
verification_requests_total = Counter(
    "verification_requests_total",
    "Total verify-payment requests by terminal state",
    ["service", "terminal_state"],
)
verification_latency_seconds = Histogram(
    "verification_latency_seconds", "Verify-payment latency seconds", ["service"]
)
upstream_failures_total = Counter(
    "upstream_failures_total",
    "Downstream capability failures",
    ["service", "dependency"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
