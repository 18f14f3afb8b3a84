"""
Adapters for Sentinel hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .http.client import HttpClient
from .storage.sqlite_geocache import SQLiteGeocodeStore
from .apple.token import AppleMapsTokenProvider

__all__ = ["HttpClient", "SQLiteGeocodeStore", "AppleMapsTokenProvider"]
