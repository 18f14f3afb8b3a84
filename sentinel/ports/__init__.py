"""
Port interfaces for Sentinel hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core pipeline and external adapters.
"""

from .geocache import GeocodeStorePort
from .tokens import TokenProviderPort

__all__ = ["GeocodeStorePort", "TokenProviderPort"]
