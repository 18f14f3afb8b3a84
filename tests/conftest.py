"""
Test configuration and shared fixtures.

This module provides pytest configuration and the fixtures shared by the
unit tests.
"""

import inspect
import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock
import pytest
from sentinel.common.cache import TTLCache
from sentinel.core.centroids import COUNTY_CENTROID
from sentinel.core.models import GeocodeFailure, GeocodeSuccess, NormalizedIncident
from sentinel.geocoding.cache import TieredGeocodeCache
from sentinel.settings import Settings


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def temp_db_path():
    """Temporary SQLite database path"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """Settings tuned for tests"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    settings.geocode.nominatim_delay_ms = 0
    settings.geocode.census_delay_ms = 0
    settings.cache.store_enabled = False
    return settings


@pytest.fixture
def mock_http():
    """HttpClient double"""
    http = Mock()
    http.get_json = AsyncMock()
    http.get_text = AsyncMock()
    return http


@pytest.fixture
def mock_store():
    """GeocodeStorePort double"""
    store = Mock()
    store.get = AsyncMock(return_value=None)
    store.save = AsyncMock(return_value=None)
    store.delete = AsyncMock(return_value=False)
    return store


@pytest.fixture
def geocache(clock):
    """Tiered geocode cache with no persistent tier"""
    return TieredGeocodeCache(TTLCache(3600, clock=clock), None)


@pytest.fixture
def success():
    def _make(lat=33.6681, lon=-117.3273, strategy="apple_maps", approximate=False):
        return GeocodeSuccess(
            lat=lat, lon=lon, approximate=approximate, strategy=strategy,
            centroid_used=COUNTY_CENTROID.name, query="q", user_location=COUNTY_CENTROID.as_param(),
        )
    return _make


@pytest.fixture
def failure():
    def _make(error="empty"):
        return GeocodeFailure(error=error)
    return _make


@pytest.fixture
def make_incident():
    """Factory for normalized incidents"""
    def _make(incident_id="RSO250001", call_type="TRAFFIC COLLISION", received_at=None,
              address="2600 *** BLOCK AMANDA AV", area="LAKE ELSINORE", station=None,
              category="traffic", priority=40):
        return NormalizedIncident(
            incident_id=incident_id,
            call_type=call_type,
            call_category=category,
            priority=priority,
            received_at=received_at or datetime(2025, 10, 16, 19, 10, tzinfo=timezone.utc),
            address_raw=address,
            area=area,
            station=station,
        )
    return _make


@pytest.fixture
def feed_record():
    """Factory for raw PressAccess feed records"""
    def _make(incident_id="RSO250001", call_type="TRAFFIC COLLISION",
              received="2025-10-16T12:10:24", address="2600 *** BLOCK AMANDA AV",
              area="LAKE ELSINORE", station="southwest"):
        return {
            "cd_Inc_ID": incident_id,
            "cd_Call_Type": call_type,
            "cd_Received": received,
            "cd_Address": address,
            "cd_Area": area,
            "cd_Disposition": "REPORT TAKEN",
            "cd_Station": station,
        }
    return _make


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: async test marker"
    )
    config.addinivalue_line(
        "markers", "slow: slow test marker"
    )


def pytest_collection_modifyitems(config, items):
    for item in items:
        # mark coroutine tests for pytest-asyncio
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)
