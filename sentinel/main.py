# sentinel/main.py
import os, asyncio
from typing import Optional
import uvicorn
from sentinel.adapters.apple.token import AppleMapsTokenProvider
from sentinel.adapters.http.client import HttpClient
from sentinel.adapters.storage.sqlite_geocache import SQLiteGeocodeStore
from sentinel.common.cache import TTLCache
from sentinel.common.concurrency import drain_detached
from sentinel.common.errors import ConfigError
from sentinel.geocoding.cache import TieredGeocodeCache
from sentinel.geocoding.providers import AppleMapsProvider, CensusProvider, NominatimProvider
from sentinel.geocoding.resolver import GeocodeResolver
from sentinel.observability.logging_setup import setup_logging, get_logger
from sentinel.observability.server import create_app
from sentinel.orchestrators.ingestion import IngestionOrchestrator
from sentinel.settings import Settings
from sentinel.sources.html_table import HtmlTableSource
from sentinel.sources.pressaccess import PressAccessClient

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _i(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value

def build_settings() -> Settings:
    s = Settings()

    # caches
    s.cache.response_ttl_sec = _i("CACHE_TTL_SECONDS", s.cache.response_ttl_sec)
    s.cache.geocode_ttl_sec = _i("GEOCODE_CACHE_TTL_SECONDS", s.cache.geocode_ttl_sec)
    s.cache.store_ttl_sec = _i("GEOCODE_STORE_TTL_SECONDS", s.cache.store_ttl_sec)
    s.cache.store_enabled = _b("GEOCODE_STORE_ENABLED", s.cache.store_enabled)
    s.cache.store_path = os.getenv("GEOCODE_STORE_PATH", s.cache.store_path)

    # geocoding
    s.geocode.max_per_request = _i("MAX_GEOCODE_PER_REQUEST", s.geocode.max_per_request)
    s.geocode.concurrency = _i("GEOCODE_CONCURRENCY", s.geocode.concurrency, minimum=1)
    s.geocode.nominatim_delay_ms = _i("NOMINATIM_DELAY_MS", s.geocode.nominatim_delay_ms)
    s.geocode.census_delay_ms = _i("CENSUS_DELAY_MS", s.geocode.census_delay_ms)
    s.geocode.census_base_url = os.getenv("CENSUS_GEOCODER_BASE", s.geocode.census_base_url)
    s.geocode.user_agent = os.getenv("GEOCODE_USER_AGENT", s.geocode.user_agent)

    # upstream feed
    s.upstream.base_url = os.getenv("UPSTREAM_BASE_URL", s.upstream.base_url)
    s.upstream.max_pages = _i("UPSTREAM_MAX_PAGES", s.upstream.max_pages, minimum=1)
    s.upstream.page_size = _i("UPSTREAM_PAGE_SIZE", s.upstream.page_size, minimum=1)
    s.upstream.http_timeout_sec = _i("HTTP_TIMEOUT_SEC", s.upstream.http_timeout_sec, minimum=1)

    # Apple Maps
    s.apple.team_id = os.getenv("APPLE_MAPKIT_TEAM_ID", s.apple.team_id)
    s.apple.key_id = os.getenv("APPLE_MAPKIT_KEY_ID", s.apple.key_id)
    s.apple.private_key = os.getenv("APPLE_MAPKIT_PRIVATE_KEY", s.apple.private_key)
    s.apple.static_token = os.getenv("APPLE_MAPKIT_TEST_TOKEN", s.apple.static_token)

    # observability
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = _i("METRICS_PORT", s.observability.http_port, minimum=1)
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level).upper()

    return s

class Services:
    """Wired service graph shared by the HTTP surface"""

    def __init__(self, s: Settings):
        self.settings = s
        self.http = HttpClient(timeout=s.upstream.http_timeout_sec)
        self.store: Optional[SQLiteGeocodeStore] = (
            SQLiteGeocodeStore(s.cache.store_path, s.cache.store_ttl_sec) if s.cache.store_enabled else None
        )
        self.tokens = AppleMapsTokenProvider(
            s.apple.team_id, s.apple.key_id, s.apple.private_key,
            static_token=s.apple.static_token, ttl_sec=s.apple.token_ttl_sec,
        )
        self.geocache = TieredGeocodeCache(TTLCache(s.cache.geocode_ttl_sec), self.store)
        self.resolver = GeocodeResolver(
            {
                "apple_maps": AppleMapsProvider(self.http, self.tokens, s.geocode.apple_base_url),
                "census": CensusProvider(self.http, s.geocode.census_base_url,
                                         delay_ms=s.geocode.census_delay_ms),
                "nominatim": NominatimProvider(self.http, s.geocode.nominatim_base_url,
                                               user_agent=s.geocode.user_agent,
                                               delay_ms=s.geocode.nominatim_delay_ms),
            },
            self.geocache,
        )
        self.orchestrator = IngestionOrchestrator(
            PressAccessClient(self.http, s.upstream.base_url, retries=s.upstream.retries),
            HtmlTableSource(self.http, s.upstream.mirrors),
            self.resolver,
            TTLCache(s.cache.response_ttl_sec),
            max_pages=s.upstream.max_pages,
            page_size=s.upstream.page_size,
        )

    async def start(self) -> None:
        if self.store is not None:
            dirname = os.path.dirname(self.store.path)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            await self.store.init()
            await self.store.gc()

    async def stop(self) -> None:
        await drain_detached()
        await self.http.close()

async def main():
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    log = get_logger("sentinel.main")

    s = build_settings()
    setup_logging(s.observability.log_level)
    log.info("settings loaded")

    services = Services(s)
    await services.start()
    if not services.tokens.configured:
        log.warning("Apple Maps credentials missing, the chain starts at Census")

    app = create_app(s, services.orchestrator, services.resolver, services.tokens)
    server = uvicorn.Server(uvicorn.Config(
        app, host="0.0.0.0", port=s.observability.http_port,
        log_level=s.observability.log_level.lower(),
    ))
    log.info(f"HTTP server listening on port {s.observability.http_port}")
    try:
        await server.serve()
    finally:
        await services.stop()
        log.info("shutdown complete")

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
