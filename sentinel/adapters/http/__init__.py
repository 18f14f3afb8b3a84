"""
HTTP transport adapter for Sentinel.
"""

from .client import HttpClient

__all__ = ["HttpClient"]
