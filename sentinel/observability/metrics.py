"""
Metrics definitions for Sentinel.

This module defines Prometheus metrics for monitoring
the incident ingestion and geocoding pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# counters
incidents_fetched = Counter(
    "incidents_fetched_total",
    "Number of normalized incidents produced by a source",
    ["source"]
)

upstream_pages = Counter(
    "upstream_pages_total",
    "Upstream feed pages requested",
    ["outcome"]
)

html_fallbacks = Counter(
    "html_fallback_total",
    "Number of times ingestion fell back to the HTML mirrors"
)

row_parse_failures = Counter(
    "html_row_parse_failures_total",
    "HTML table rows rejected during parsing"
)

feed_record_failures = Counter(
    "feed_record_failures_total",
    "Feed records rejected during normalization"
)

geocode_requests = Counter(
    "geocode_provider_requests_total",
    "Geocoding provider calls by outcome",
    ["provider", "outcome"]
)

geocode_cache_hits = Counter(
    "geocode_cache_hits_total",
    "Geocode cache hits by tier",
    ["tier"]
)

geocode_store_errors = Counter(
    "geocode_store_errors_total",
    "Failures talking to the persistent geocode store",
    ["operation"]
)

response_cache_hits = Counter(
    "response_cache_hits_total",
    "Ingestion calls served from the response cache"
)

# histograms
ingestion_seconds = Histogram(
    "ingestion_duration_seconds",
    "Time spent assembling one incident list",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

geocode_seconds = Histogram(
    "geocode_duration_seconds",
    "Time spent resolving one address through the provider chain",
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
)

# gauges
response_cache_size = Gauge(
    "response_cache_size",
    "Entries currently held in the response cache"
)

geocode_cache_size = Gauge(
    "geocode_cache_size",
    "Entries currently held in the local geocode cache"
)
