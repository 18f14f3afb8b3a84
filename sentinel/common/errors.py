"""
Error types for Sentinel.

This module defines the exception hierarchy shared by the sources,
the geocoding chain and the ingestion orchestrator.
"""

from typing import List, Optional


class SentinelError(Exception):
    """Base class for Sentinel failures."""

    error_code = "SENTINEL_ERROR"


class ConfigError(SentinelError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class HttpError(SentinelError):
    """Raised by the HTTP transport for bad statuses and network failures."""

    error_code = "HTTP_ERROR"

    def __init__(self, message: str, *, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class UpstreamError(SentinelError):
    """Raised when the incident feed returns an unusable page."""

    error_code = "UPSTREAM_ERROR"


class IngestionError(SentinelError):
    """Raised when every incident source has been exhausted."""

    error_code = "INGESTION_ERROR"


class BatchError(SentinelError):
    """Raised by map_limit after all workers finished and some items failed."""

    error_code = "BATCH_ERROR"

    def __init__(self, failures: List["object"]):
        self.failures = failures
        super().__init__(f"{len(failures)} batch item(s) failed")
