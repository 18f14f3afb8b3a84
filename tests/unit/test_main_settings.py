"""
Settings defaults and environment override tests.
"""

import pytest
from sentinel.common.errors import ConfigError
from sentinel.main import Services, build_settings
from sentinel.settings import HTML_MIRRORS, UPSTREAM_BASE, Settings

ENV_VARS = [
    "CACHE_TTL_SECONDS", "GEOCODE_CACHE_TTL_SECONDS", "MAX_GEOCODE_PER_REQUEST", "GEOCODE_CONCURRENCY",
    "NOMINATIM_DELAY_MS", "CENSUS_GEOCODER_BASE", "APPLE_MAPKIT_TEAM_ID", "APPLE_MAPKIT_KEY_ID",
    "APPLE_MAPKIT_PRIVATE_KEY", "APPLE_MAPKIT_TEST_TOKEN", "GEOCODE_STORE_PATH", "GEOCODE_STORE_ENABLED",
    "LOG_LEVEL", "METRICS_PORT", "METRICS_ENABLED", "GEOCODE_STORE_TTL_SECONDS", "CENSUS_DELAY_MS",
    "GEOCODE_USER_AGENT", "UPSTREAM_BASE_URL", "UPSTREAM_MAX_PAGES", "UPSTREAM_PAGE_SIZE", "HTTP_TIMEOUT_SEC",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        s = Settings()
        assert s.cache.response_ttl_sec == 60
        assert s.cache.geocode_ttl_sec == 259200
        assert s.geocode.max_per_request == 40
        assert s.geocode.concurrency == 3
        assert s.geocode.nominatim_delay_ms == 800
        assert s.upstream.base_url == UPSTREAM_BASE
        assert s.upstream.mirrors == HTML_MIRRORS
        assert s.upstream.max_pages == 10
        assert s.upstream.page_size == 1000

    def test_mirror_lists_are_independent(self):
        a, b = Settings(), Settings()
        a.upstream.mirrors.append("https://extra.test/")
        assert b.upstream.mirrors == HTML_MIRRORS


class TestBuildSettings:
    def test_no_env_keeps_defaults(self):
        assert build_settings() == Settings()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "30")
        monkeypatch.setenv("GEOCODE_CACHE_TTL_SECONDS", "600")
        monkeypatch.setenv("MAX_GEOCODE_PER_REQUEST", "100")
        monkeypatch.setenv("GEOCODE_CONCURRENCY", "5")
        monkeypatch.setenv("NOMINATIM_DELAY_MS", "1000")
        monkeypatch.setenv("CENSUS_GEOCODER_BASE", "https://census.test/geocode")
        monkeypatch.setenv("APPLE_MAPKIT_TEST_TOKEN", "tok")
        monkeypatch.setenv("GEOCODE_STORE_ENABLED", "false")
        monkeypatch.setenv("GEOCODE_STORE_PATH", "/tmp/geo.db")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("METRICS_PORT", "9100")

        s = build_settings()

        assert s.cache.response_ttl_sec == 30
        assert s.cache.geocode_ttl_sec == 600
        assert s.geocode.max_per_request == 100
        assert s.geocode.concurrency == 5
        assert s.geocode.nominatim_delay_ms == 1000
        assert s.geocode.census_base_url == "https://census.test/geocode"
        assert s.apple.static_token == "tok"
        assert s.cache.store_enabled is False
        assert s.cache.store_path == "/tmp/geo.db"
        assert s.observability.log_level == "DEBUG"
        assert s.observability.http_port == 9100

    @pytest.mark.parametrize("name,value", [
        ("CACHE_TTL_SECONDS", "abc"),
        ("GEOCODE_CONCURRENCY", "0"),
        ("MAX_GEOCODE_PER_REQUEST", "-1"),
        ("METRICS_PORT", "80.5"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigError):
            build_settings()


class TestServices:
    def test_wiring(self, sample_settings):
        services = Services(sample_settings)

        assert services.store is None
        assert [p.name for p in services.resolver.chain] == ["apple_maps", "census", "nominatim"]
        assert services.orchestrator.resolver is services.resolver
        assert services.resolver.cache is services.geocache
        assert not services.tokens.configured
