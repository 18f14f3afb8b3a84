# sentinel/settings.py
from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field

UPSTREAM_BASE = "https://publicaccess.riversidesheriff.org/api/publicaccess/incidents"
HTML_MIRRORS = [
    "https://pressaccess.riversidesheriff.org/",
    "https://publicaccess.riversidesheriff.org/",
]

class CacheConfig(BaseModel):
    response_ttl_sec: int = 60
    geocode_ttl_sec: int = 259200             # 3 days
    store_enabled: bool = True
    store_path: str = "data/geocode.db"
    store_ttl_sec: int = 30 * 24 * 60 * 60    # 30 days

class GeocodeConfig(BaseModel):
    max_per_request: int = 40
    concurrency: int = 3
    nominatim_delay_ms: int = 800
    census_delay_ms: int = 100
    census_base_url: str = "https://geocoding.geo.census.gov/geocoder/locations/onelineaddress"
    apple_base_url: str = "https://maps-api.apple.com/v1/geocode"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "Sentinel-RSO/1.0 (incident-tracker)"

class UpstreamConfig(BaseModel):
    base_url: str = UPSTREAM_BASE
    mirrors: List[str] = Field(default_factory=lambda: list(HTML_MIRRORS))
    max_pages: int = 10
    page_size: int = 1000
    http_timeout_sec: int = 30
    retries: int = 1

class AppleMapsConfig(BaseModel):
    team_id: Optional[str] = None
    key_id: Optional[str] = None
    private_key: Optional[str] = None
    static_token: Optional[str] = None        # pre-issued token, skips signing
    token_ttl_sec: int = 30 * 60

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "Sentinel-RSO"
    build_version: str = "1.0.0"
    build_date: str = "2025-10-16"
    log_level: str = "INFO"

class Settings(BaseModel):
    cache: CacheConfig = Field(default_factory=CacheConfig)
    geocode: GeocodeConfig = Field(default_factory=GeocodeConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    apple: AppleMapsConfig = Field(default_factory=AppleMapsConfig)
    observability: Observability = Field(default_factory=Observability)
