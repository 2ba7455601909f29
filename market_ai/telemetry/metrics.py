# MarketAI (c) 2025 Ajay Rajput
# Licensed under Business Source License 1.1 – see LICENSE for details.
"""
Prometheus metrics for MarketAI telemetry.

Provider call outcomes, fallback hops and degraded responses are exported on
the ``/metrics`` endpoint of the API.
"""

from prometheus_client import Counter, Histogram

# Provider metrics
PROVIDER_REQUESTS = Counter(
    "marketai_provider_requests_total",
    "Provider requests by provider and outcome",
    ["provider", "outcome"],
)

PROVIDER_LATENCY = Histogram(
    "marketai_provider_latency_seconds",
    "Provider response latency in seconds",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0],
)

# Dispatcher metrics
FALLBACKS_TOTAL = Counter(
    "marketai_fallbacks_total",
    "Fallback hops by failed provider, fallback provider and outcome",
    ["from_provider", "to_provider", "outcome"],
)

DEGRADED_RESPONSES_TOTAL = Counter(
    "marketai_degraded_responses_total",
    "Static placeholder responses returned after every attempt failed",
    ["provider"],
)
