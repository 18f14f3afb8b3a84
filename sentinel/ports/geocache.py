"""
Persistent geocode store port interface.

This module defines the protocol for the shared, cross-process
geocode cache that sits behind the local in-memory tier.
"""

from typing import Optional, Protocol, Union
from sentinel.core.models import GeocodeFailure, GeocodeSuccess

class GeocodeStorePort(Protocol):
    """Persistent geocode store keyed by (address, area)"""

    async def get(self, address: str, area: Optional[str]) -> Optional[GeocodeSuccess]:
        """
        Look up a stored geocode.

        Args:
            address: Raw address text
            area: Area / city name, may be None

        Returns:
            Stored success, or None on miss
        """
        ...

    async def save(self, address: str, area: Optional[str],
                   result: Union[GeocodeSuccess, GeocodeFailure]) -> None:
        """
        Store a geocode result. Implementations ignore failures.

        Args:
            address: Raw address text
            area: Area / city name, may be None
            result: Resolver output
        """
        ...

    async def delete(self, address: str, area: Optional[str]) -> bool:
        """
        Remove a stored geocode.

        Returns:
            True when an entry was removed
        """
        ...
