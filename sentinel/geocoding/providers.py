"""
Geocoding providers for Sentinel.

Each provider resolves one address into a GeocodeSuccess or a
GeocodeFailure. Providers never raise for HTTP errors or empty
answers; those become failures so the resolver can move down the
chain.
"""

import asyncio
import math
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union
from sentinel.adapters.http.client import HttpClient
from sentinel.common.errors import HttpError
from sentinel.core.address import COUNTY_SUFFIX, county_query, parse_block_address, with_area
from sentinel.core.centroids import Centroid
from sentinel.core.models import GeocodeFailure, GeocodeSuccess, Provider
from sentinel.observability import metrics
from sentinel.observability.logging_setup import get_logger
from sentinel.ports.tokens import TokenProviderPort

log = get_logger("sentinel.providers")

ProviderResult = Union[GeocodeSuccess, GeocodeFailure]
Sleep = Callable[[float], Awaitable[None]]


def _coords(lat: Any, lon: Any) -> Optional[Tuple[float, float]]:
    try:
        lat_f, lon_f = float(lat), float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return None
    if lat_f == 0 and lon_f == 0:
        return None
    return lat_f, lon_f


def _obj(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(items: Any) -> Dict[str, Any]:
    if isinstance(items, list) and items:
        return _obj(items[0])
    return {}


class GeocodeProvider:
    """Base class for one tier of the fallback chain"""

    name: Provider

    def __init__(self, http: HttpClient):
        self.http = http

    async def lookup(self, address: str, area: Optional[str], centroid: Centroid) -> ProviderResult:
        raise NotImplementedError

    def _success(self, lat: float, lon: float, *, approximate: bool, query: str,
                 centroid: Centroid) -> GeocodeSuccess:
        metrics.geocode_requests.labels(provider=self.name, outcome="success").inc()
        log.bind(provider=self.name, query=query).info(f"geocoded -> ({lat}, {lon})")
        return GeocodeSuccess(
            lat=lat,
            lon=lon,
            approximate=approximate,
            strategy=self.name,
            centroid_used=centroid.name,
            query=query,
            user_location=centroid.as_param(),
        )

    def _failure(self, error: str, *, query: Optional[str], centroid: Centroid,
                 outcome: str = "empty") -> GeocodeFailure:
        metrics.geocode_requests.labels(provider=self.name, outcome=outcome).inc()
        log.bind(provider=self.name, query=query, status=outcome).info(f"no answer: {error}")
        return GeocodeFailure(
            error=f"{self.name}: {error}",
            query=query,
            user_location=centroid.as_param(),
            centroid_used=centroid.name,
        )

    def _http_failure(self, e: HttpError, *, query: str, centroid: Centroid) -> GeocodeFailure:
        log.bind(provider=self.name, query=query, status=e.status).warning(f"HTTP error: {e}")
        return self._failure(f"HTTP {e.status or 'error'}", query=query, centroid=centroid, outcome="error")


class AppleMapsProvider(GeocodeProvider):
    """Apple Maps Server API geocoder, biased with a userLocation hint"""

    name = "apple_maps"

    def __init__(self, http: HttpClient, tokens: TokenProviderPort,
                 base_url: str = "https://maps-api.apple.com/v1/geocode"):
        super().__init__(http)
        self.tokens = tokens
        self.base_url = base_url

    async def lookup(self, address: str, area: Optional[str], centroid: Centroid) -> ProviderResult:
        query = with_area(address, area)
        token = await self.tokens.get_token()
        if not token:
            return self._failure("token unavailable", query=query, centroid=centroid, outcome="no_token")

        params = {
            "q": query,
            "limitToCountries": "US",
            "userLocation": centroid.as_param(),
        }
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        try:
            data = await self.http.get_json(self.base_url, params=params, headers=headers)
        except HttpError as e:
            return self._http_failure(e, query=query, centroid=centroid)

        coordinate = _obj(_first(_obj(data).get("results")).get("coordinate"))
        coords = _coords(coordinate.get("latitude"), coordinate.get("longitude"))
        if coords:
            return self._success(*coords, approximate=False, query=query, centroid=centroid)
        return self._failure("no results", query=query, centroid=centroid)


class CensusProvider(GeocodeProvider):
    """US Census one-line address geocoder with block-address retry"""

    name = "census"

    def __init__(self, http: HttpClient,
                 base_url: str = "https://geocoding.geo.census.gov/geocoder/locations/onelineaddress",
                 *,
                 delay_ms: int = 0,
                 sleep: Sleep = asyncio.sleep):
        super().__init__(http)
        self.base_url = base_url
        self.delay_ms = delay_ms
        self._sleep = sleep

    async def _match(self, query: str) -> Tuple[Optional[Tuple[float, float]], Optional[HttpError]]:
        if self.delay_ms:
            await self._sleep(self.delay_ms / 1000)
        params = {"address": query, "benchmark": "Public_AR_Current", "format": "json"}
        try:
            data = await self.http.get_json(self.base_url, params=params,
                                            headers={"Accept": "application/json"})
        except HttpError as e:
            log.bind(provider=self.name, query=query, status=e.status).warning(f"HTTP error: {e}")
            return None, e
        matches = _obj(_obj(data).get("result")).get("addressMatches")
        coordinates = _obj(_first(matches).get("coordinates"))
        return _coords(coordinates.get("y"), coordinates.get("x")), None

    async def lookup(self, address: str, area: Optional[str], centroid: Centroid) -> ProviderResult:
        exact_query = county_query(address, area)
        coords, error = await self._match(exact_query)
        if coords:
            return self._success(*coords, approximate=False, query=exact_query, centroid=centroid)

        block = parse_block_address(address)
        if block and area:
            approx_query = f"{block}, {area}, {COUNTY_SUFFIX}"
            log.info(f"census retrying block address as {approx_query!r}")
            coords, error = await self._match(approx_query)
            if coords:
                return self._success(*coords, approximate=True, query=approx_query, centroid=centroid)

        if error is not None:
            return self._failure(f"HTTP {error.status or 'error'}", query=exact_query,
                                 centroid=centroid, outcome="error")
        return self._failure("no address match", query=exact_query, centroid=centroid)


class NominatimProvider(GeocodeProvider):
    """OpenStreetMap Nominatim search, spaced to respect the usage policy"""

    name = "nominatim"

    def __init__(self, http: HttpClient,
                 base_url: str = "https://nominatim.openstreetmap.org/search",
                 *,
                 user_agent: str = "Sentinel-RSO/1.0 (incident-tracker)",
                 delay_ms: int = 800,
                 sleep: Sleep = asyncio.sleep):
        super().__init__(http)
        self.base_url = base_url
        self.user_agent = user_agent
        self.delay_ms = delay_ms
        self._sleep = sleep
        # serializes the pre-call delay so concurrent callers stay spaced
        self._gate = asyncio.Lock()

    async def lookup(self, address: str, area: Optional[str], centroid: Centroid) -> ProviderResult:
        parsed = parse_block_address(address)
        query = county_query(parsed or address, area)

        async with self._gate:
            await self._sleep(self.delay_ms / 1000)

        params = {"format": "json", "q": query, "limit": 1}
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        try:
            data = await self.http.get_json(self.base_url, params=params, headers=headers)
        except HttpError as e:
            return self._http_failure(e, query=query, centroid=centroid)

        first = _first(data)
        coords = _coords(first.get("lat"), first.get("lon"))
        if coords:
            return self._success(*coords, approximate=parsed is not None, query=query, centroid=centroid)
        return self._failure("no results", query=query, centroid=centroid)
