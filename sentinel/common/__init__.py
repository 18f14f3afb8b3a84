"""
Shared utilities for Sentinel.

Caching, bounded concurrency, retries and the error hierarchy used by
every other package.
"""

from .cache import TTLCache
from .concurrency import TaskFailure, drain_detached, map_limit, spawn_detached
from .errors import (
    BatchError, ConfigError, HttpError, IngestionError, SentinelError, UpstreamError,
)

__all__ = [
    "TTLCache", "TaskFailure", "drain_detached", "map_limit", "spawn_detached",
    "BatchError", "ConfigError", "HttpError", "IngestionError", "SentinelError", "UpstreamError",
]
