"""
Storage adapters for Sentinel hexagonal architecture.

This module contains the SQLite-backed persistent geocode store.
"""

from .sqlite_geocache import SQLiteGeocodeStore

__all__ = ["SQLiteGeocodeStore"]
