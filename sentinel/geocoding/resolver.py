"""
Geocode resolver for Sentinel.

Resolves an incident address through the tiered cache and then the
provider chain Apple Maps -> Census -> Nominatim, stopping at the first
success. Every lookup is biased by a centroid chosen from the station
and area of the incident.
"""

import time
from typing import Dict, List, Optional, Union
from sentinel.core.centroids import resolve_centroid
from sentinel.core.models import GeocodeFailure, GeocodeSuccess
from sentinel.geocoding.cache import TieredGeocodeCache
from sentinel.geocoding.providers import GeocodeProvider
from sentinel.observability import metrics
from sentinel.observability.logging_setup import get_logger

log = get_logger("sentinel.resolver")

CHAIN_ORDER = ("apple_maps", "census", "nominatim")

PROVIDER_ALIASES = {"apple": "apple_maps"}


class GeocodeResolver:
    """Cache-first provider fallback chain"""

    def __init__(self, providers: Dict[str, GeocodeProvider], cache: TieredGeocodeCache):
        """
        Args:
            providers: Provider instances keyed by provider name
            cache: Tiered geocode cache
        """
        self.providers = providers
        self.cache = cache

    @property
    def chain(self) -> List[GeocodeProvider]:
        return [self.providers[name] for name in CHAIN_ORDER if name in self.providers]

    def provider(self, name: str) -> GeocodeProvider:
        """
        Look up one provider by name or alias.

        Raises:
            ValueError: Unknown provider name
        """
        key = PROVIDER_ALIASES.get(name.strip().lower(), name.strip().lower())
        if key not in CHAIN_ORDER or key not in self.providers:
            raise ValueError(f"unknown geocode provider: {name!r}")
        return self.providers[key]

    async def geocode_one(self,
                          address: Optional[str],
                          area: Optional[str],
                          no_cache: bool = False,
                          station: Optional[str] = None,
                          force_provider: Optional[str] = None) -> Union[GeocodeSuccess, GeocodeFailure]:
        """
        Resolve one address.

        Args:
            address: Raw address text
            area: Area / city name
            no_cache: Skip both cache reads and writes
            station: Station name used for the location bias
            force_provider: Call only this provider

        Returns:
            GeocodeSuccess or GeocodeFailure; never raises for lookup errors

        Raises:
            ValueError: force_provider names no known provider
        """
        if not address:
            return GeocodeFailure(error="missing address")

        forced = self.provider(force_provider) if force_provider else None

        if not no_cache:
            cached = await self.cache.get(address, area)
            if cached is not None:
                return cached

        centroid = resolve_centroid(station, area)
        started = time.perf_counter()
        try:
            if forced is not None:
                result = await forced.lookup(address, area, centroid)
            else:
                result = await self._run_chain(address, area, centroid)
        finally:
            metrics.geocode_seconds.observe(time.perf_counter() - started)

        if isinstance(result, GeocodeSuccess) and not no_cache:
            self.cache.put(address, area, result)
        return result

    async def _run_chain(self, address, area, centroid) -> Union[GeocodeSuccess, GeocodeFailure]:
        errors: List[str] = []
        last: Optional[GeocodeFailure] = None
        for provider in self.chain:
            result = await provider.lookup(address, area, centroid)
            if isinstance(result, GeocodeSuccess):
                return result
            errors.append(result.error)
            last = result

        log.bind(address=address, area=area).info(f"all providers failed for {address!r}")
        return GeocodeFailure(
            error=("all providers failed: " + "; ".join(errors)) if errors else "no providers configured",
            query=last.query if last else None,
            user_location=centroid.as_param(),
            centroid_used=centroid.name,
        )
