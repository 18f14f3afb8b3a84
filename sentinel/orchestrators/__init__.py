"""
Orchestrators for Sentinel.
"""

from .ingestion import IngestionOrchestrator, response_cache_key

__all__ = ["IngestionOrchestrator", "response_cache_key"]
