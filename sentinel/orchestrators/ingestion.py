"""
Ingestion orchestrator for Sentinel.

This module assembles one incident list: response cache, JSON feed with
HTML fallback, then optional bounded-concurrency geocoding.
"""

import inspect
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Union
from sentinel.common.cache import TTLCache
from sentinel.common.concurrency import TaskFailure, map_limit
from sentinel.core.address import is_geocodable
from sentinel.core.models import GeocodeFailure, GeocodeSuccess, NormalizedIncident
from sentinel.core.normalize import to_utc
from sentinel.geocoding.resolver import GeocodeResolver
from sentinel.observability import metrics
from sentinel.observability.logging_setup import get_logger
from sentinel.sources.html_table import HtmlTableSource
from sentinel.sources.pressaccess import PressAccessClient

log = get_logger("sentinel.ingestion")

ProgressCallback = Callable[[str, int, int], Union[None, Awaitable[None]]]


def response_cache_key(geocode: bool, since: Optional[datetime], station: Optional[str]) -> str:
    since_part = since.isoformat() if since else "all"
    return f"incidents:geocode={str(geocode).lower()}:since={since_part}:station={station or 'all'}"


class IngestionOrchestrator:
    """Builds the incident list served to API callers"""

    def __init__(self,
                 client: PressAccessClient,
                 html_source: HtmlTableSource,
                 resolver: GeocodeResolver,
                 response_cache: TTLCache[List[NormalizedIncident]],
                 *,
                 max_pages: int = 10,
                 page_size: int = 1000):
        """
        Args:
            client: JSON feed client
            html_source: HTML table fallback
            resolver: Geocode resolver
            response_cache: Cache of assembled incident lists
            max_pages: Pagination cap for the feed
            page_size: Feed page size
        """
        self.client = client
        self.html_source = html_source
        self.resolver = resolver
        self.response_cache = response_cache
        self.max_pages = max_pages
        self.page_size = page_size

    async def scrape_incidents(self,
                               geocode: bool = False,
                               since: Optional[datetime] = None,
                               station: Optional[str] = None,
                               max_geocode: int = 40,
                               geocode_concurrency: int = 3,
                               on_progress: Optional[ProgressCallback] = None) -> List[NormalizedIncident]:
        """
        Return incidents, newest first, optionally geocoded.

        Args:
            geocode: Attach coordinates to the first max_geocode addressable records
            since: Oldest received_at of interest; naive values are Pacific time
            station: Station filter, also used as the location bias
            max_geocode: Cap on geocoded records
            geocode_concurrency: Concurrent geocode lookups
            on_progress: Called as (phase, done, total); may be sync or async

        Returns:
            Incident list (shared with the response cache)

        Raises:
            IngestionError: Both the feed and every HTML mirror failed
        """
        since = to_utc(since)
        key = response_cache_key(geocode, since, station)
        cached = self.response_cache.get(key)
        if cached is not None:
            metrics.response_cache_hits.inc()
            log.debug(f"response cache hit: {key}")
            return cached

        with metrics.ingestion_seconds.time():
            incidents = await self._fetch(since, station)
            if geocode and incidents:
                await self._geocode(incidents, station, max_geocode, geocode_concurrency, on_progress)

        self.response_cache.set(key, incidents)
        metrics.response_cache_size.set(len(self.response_cache))
        return incidents

    async def _fetch(self, since: Optional[datetime], station: Optional[str]) -> List[NormalizedIncident]:
        incidents: List[NormalizedIncident] = []
        try:
            incidents = await self.client.fetch_incidents_until(
                since, max_pages=self.max_pages, page_size=self.page_size, station=station
            )
        except Exception as e:
            log.warning(f"incident feed failed, falling back to HTML: {e!r}")
        if incidents:
            return incidents

        metrics.html_fallbacks.inc()
        log.info("feed returned no incidents, using the HTML table")
        # IngestionError propagates to the caller
        return await self.html_source.fetch_incidents()

    async def _geocode(self,
                       incidents: List[NormalizedIncident],
                       station: Optional[str],
                       max_geocode: int,
                       concurrency: int,
                       on_progress: Optional[ProgressCallback]) -> None:
        candidates = [i for i in incidents if is_geocodable(i.address_raw)][:max(0, max_geocode)]
        total = len(candidates)
        done = 0
        await _notify(on_progress, "Geocoding", 0, total)

        async def lookup(incident: NormalizedIncident, _: int) -> Union[GeocodeSuccess, GeocodeFailure]:
            nonlocal done
            try:
                return await self.resolver.geocode_one(
                    incident.address_raw, incident.area, station=station or incident.station
                )
            finally:
                done += 1
                await _notify(on_progress, "Geocoding", done, total)

        started = time.perf_counter()
        results = await map_limit(candidates, concurrency, lookup, return_exceptions=True)
        located = 0
        for incident, result in zip(candidates, results):
            if isinstance(result, TaskFailure):
                incident.attach_geocode(GeocodeFailure(error=f"geocode raised: {result.error!r}"))
                continue
            incident.attach_geocode(result)
            located += result.ok
        log.info(f"geocoded {located}/{total} incidents in {time.perf_counter() - started:.2f}s")


async def _notify(callback: Optional[ProgressCallback], phase: str, done: int, total: int) -> None:
    if callback is None:
        return
    try:
        outcome: Any = callback(phase, done, total)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception as e:
        log.warning(f"progress callback failed: {e!r}")
