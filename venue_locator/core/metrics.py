"""Prometheus metrics for location resolution."""

from prometheus_client import Counter, Histogram

PROVIDER_REQUESTS_TOTAL = Counter(
    "venue_locator_provider_requests_total",
    "Reverse geocoding calls by provider and outcome",
    labelnames=["provider", "outcome"],
)

PROVIDER_LATENCY_SECONDS = Histogram(
    "venue_locator_provider_latency_seconds",
    "Reverse geocoding latency by provider",
    labelnames=["provider"],
)

ACQUISITION_ATTEMPTS_TOTAL = Counter(
    "venue_locator_acquisition_attempts_total",
    "Device position requests by outcome",
    labelnames=["outcome"],
)

RESOLUTIONS_TOTAL = Counter(
    "venue_locator_resolutions_total",
    "Completed resolution cycles by terminal state",
    labelnames=["state"],
)
