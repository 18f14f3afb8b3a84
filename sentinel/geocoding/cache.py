"""
Two-tier geocode cache for Sentinel.

The local TTLCache answers first; on a miss the persistent store is
consulted and a hit there is copied into the local tier. Writes go to
the local tier immediately and to the store as detached tasks.
"""

from typing import Dict, Optional
from sentinel.common.cache import TTLCache
from sentinel.common.concurrency import spawn_detached
from sentinel.core.models import GeocodeSuccess
from sentinel.observability import metrics
from sentinel.observability.logging_setup import get_logger
from sentinel.ports.geocache import GeocodeStorePort

log = get_logger("sentinel.geocache")


def cache_key(address: str, area: Optional[str]) -> str:
    return f"geo:{address}|{area or ''}"


class TieredGeocodeCache:
    """Local TTL tier in front of an optional persistent store"""

    def __init__(self, local: TTLCache[GeocodeSuccess], store: Optional[GeocodeStorePort] = None):
        self.local = local
        self.store = store

    async def get(self, address: str, area: Optional[str]) -> Optional[GeocodeSuccess]:
        """
        Look up a geocode in both tiers.

        Store errors are logged and treated as a miss.

        Args:
            address: Raw address text
            area: Area / city name

        Returns:
            Cached success, or None
        """
        key = cache_key(address, area)
        hit = self.local.get(key)
        if hit is not None:
            metrics.geocode_cache_hits.labels(tier="local").inc()
            log.debug(f"local cache hit: {key}")
            return hit

        if self.store is None:
            return None
        try:
            stored = await self.store.get(address, area)
        except Exception as e:
            metrics.geocode_store_errors.labels(operation="get").inc()
            log.warning(f"geocode store get failed (non-fatal) key:{key} error:{e!r}")
            return None
        if stored is None or not isinstance(stored, GeocodeSuccess):
            return None

        metrics.geocode_cache_hits.labels(tier="store").inc()
        log.debug(f"store cache hit: {key}")
        self.local.set(key, stored)
        metrics.geocode_cache_size.set(len(self.local))
        return stored

    def put(self, address: str, area: Optional[str], result: GeocodeSuccess) -> None:
        """
        Cache a success in both tiers; the store write is not awaited.

        Args:
            address: Raw address text
            area: Area / city name
            result: Successful geocode
        """
        if not isinstance(result, GeocodeSuccess):
            return
        key = cache_key(address, area)
        self.local.set(key, result)
        metrics.geocode_cache_size.set(len(self.local))
        if self.store is not None:
            spawn_detached(self._save(address, area, result), name=f"geostore-save:{key}")

    async def _save(self, address: str, area: Optional[str], result: GeocodeSuccess) -> None:
        try:
            await self.store.save(address, area, result)
        except Exception as e:
            metrics.geocode_store_errors.labels(operation="save").inc()
            log.warning(f"geocode store save failed (non-fatal) address:{address} error:{e!r}")

    async def purge(self, address: str, area: Optional[str]) -> Dict[str, bool]:
        """
        Remove one address from both tiers.

        Returns:
            Which tiers held an entry
        """
        local_deleted = self.local.delete(cache_key(address, area))
        store_deleted = False
        if self.store is not None:
            try:
                store_deleted = await self.store.delete(address, area)
            except Exception as e:
                metrics.geocode_store_errors.labels(operation="delete").inc()
                log.warning(f"geocode store delete failed address:{address} error:{e!r}")
        return {"local": local_deleted, "store": store_deleted}
