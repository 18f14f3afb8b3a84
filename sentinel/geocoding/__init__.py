"""
Geocoding for Sentinel.

Providers, the tiered geocode cache and the resolver that chains them.
"""

from .cache import TieredGeocodeCache, cache_key
from .providers import AppleMapsProvider, CensusProvider, GeocodeProvider, NominatimProvider
from .resolver import GeocodeResolver

__all__ = [
    "TieredGeocodeCache", "cache_key", "AppleMapsProvider", "CensusProvider",
    "GeocodeProvider", "NominatimProvider", "GeocodeResolver",
]
