"""
HTTP endpoints for Sentinel.

This module implements the health, readiness, metrics and info
endpoints plus the incident, geocode debug and geocode purge API.
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sentinel.adapters.apple.token import AppleMapsTokenProvider
from sentinel.core.filters import MAX_LIMIT, IncidentFilters, apply_filters, parse_bbox
from sentinel.core.normalize import parse_feed_timestamp
from sentinel.geocoding.resolver import CHAIN_ORDER, GeocodeResolver
from sentinel.observability.logging_setup import get_logger
from sentinel.orchestrators.ingestion import IngestionOrchestrator
from sentinel.settings import Settings

log = get_logger("sentinel.api")

TRUTHY = ("1", "true", "yes")


def _parse_time(name: str, value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = parse_feed_timestamp(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"invalid {name} timestamp")
    return parsed


def create_app(settings: Settings,
               orchestrator: IngestionOrchestrator,
               resolver: GeocodeResolver,
               tokens: Optional[AppleMapsTokenProvider] = None) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Riverside County incident ingestion and geocoding service"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "geocode_store": settings.cache.store_enabled,
            "apple_maps": bool(tokens and tokens.configured),
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level
        })

    @app.get("/api/incidents")
    async def incidents(
        since: Optional[str] = None,
        until: Optional[str] = None,
        area: Optional[str] = None,
        callCategory: Optional[str] = None,
        callType: Optional[str] = None,
        minPriority: int = 0,
        q: Optional[str] = None,
        bbox: Optional[str] = None,
        limit: int = Query(MAX_LIMIT, ge=0),
        geocode: str = "",
        station: Optional[str] = None,
        maxGeocode: Optional[int] = Query(None, ge=0),
        geocodeConcurrency: Optional[int] = Query(None, ge=1),
    ):
        """
        Incident list with optional geocoding and filters.

        Ingestion failures are reported in the body with status 200 so
        callers always receive a list.
        """
        since_at = _parse_time("since", since)
        filters = IncidentFilters(
            since=since_at,
            until=_parse_time("until", until),
            area=area,
            call_category=callCategory,
            call_type=callType,
            min_priority=minPriority,
            q=q,
            bbox=parse_bbox(bbox),
            limit=min(limit, MAX_LIMIT),
        )
        try:
            items = await orchestrator.scrape_incidents(
                geocode=geocode.lower() in TRUTHY,
                since=since_at,
                station=station or None,
                max_geocode=maxGeocode if maxGeocode is not None else settings.geocode.max_per_request,
                geocode_concurrency=geocodeConcurrency or settings.geocode.concurrency,
            )
        except Exception as e:
            log.error(f"incident ingestion failed: {e!r}")
            return JSONResponse({"count": 0, "items": [], "error": str(e) or type(e).__name__})

        selected = apply_filters(items, filters)
        log.info(f"serving {len(selected)} of {len(items)} incidents")
        return JSONResponse(
            {"count": len(selected), "items": [i.model_dump(mode="json") for i in selected]},
            headers={"Cache-Control": "public, s-maxage=30, stale-while-revalidate=60"},
        )

    @app.get("/api/geocode-debug")
    async def geocode_debug(address: Optional[str] = None,
                            area: Optional[str] = None,
                            station: Optional[str] = None):
        """Run every provider and the normal chain for one address, bypassing the caches."""
        if not address:
            raise HTTPException(status_code=400, detail="Missing address parameter")

        results: Dict[str, Any] = {}
        for name in CHAIN_ORDER:
            if name not in resolver.providers:
                continue
            result = await resolver.geocode_one(address, area, no_cache=True,
                                                station=station, force_provider=name)
            results[name] = result.to_dict()
        normal = await resolver.geocode_one(address, area, no_cache=True, station=station)
        results["normal"] = normal.to_dict()

        return JSONResponse(
            {
                "request": {"address": address, "area": area, "station": station,
                            "timestamp": time.time()},
                "environment": {
                    "apple_maps_configured": bool(tokens and tokens.configured),
                    "geocode_store": settings.cache.store_enabled,
                },
                "results": results,
            },
            headers={"Cache-Control": "no-store"},
        )

    @app.api_route("/api/geocode-purge", methods=["GET", "POST"])
    async def geocode_purge(address: Optional[str] = None, area: Optional[str] = None):
        """Drop one address from both geocode cache tiers."""
        if not address:
            return JSONResponse({"ok": False, "error": "Missing address"}, status_code=400)
        deleted = await resolver.cache.purge(address, area)
        log.info(f"purged geocode cache address:{address} area:{area} deleted:{deleted}")
        return JSONResponse({"ok": True, "address": address, "area": area,
                             "localDeleted": deleted["local"], "storeDeleted": deleted["store"]})

    @app.get("/")
    async def root():
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "incidents": "/api/incidents",
                "geocode_debug": "/api/geocode-debug",
                "geocode_purge": "/api/geocode-purge"
            }
        })

    return app
