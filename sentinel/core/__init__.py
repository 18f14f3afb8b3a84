"""
Core domain models and pure functions for Sentinel.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    Category, Classification, GeocodeFailure, GeocodeResult, GeocodeSuccess,
    NormalizedIncident, Provider, RawIncidentRecord,
)
from .classify import classify
from .address import parse_block_address
from .centroids import Centroid, resolve_centroid

__all__ = [
    "Category", "Classification", "GeocodeFailure", "GeocodeResult", "GeocodeSuccess",
    "NormalizedIncident", "Provider", "RawIncidentRecord", "classify",
    "parse_block_address", "Centroid", "resolve_centroid",
]
