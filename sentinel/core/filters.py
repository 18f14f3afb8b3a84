"""
Incident list filtering for Sentinel.

Pure filtering applied by the HTTP surface on top of an assembled
incident list.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field
from .models import NormalizedIncident

MAX_LIMIT = 10000

BBox = Tuple[float, float, float, float]  # min_lon, min_lat, max_lon, max_lat


class IncidentFilters(BaseModel):
    """Query filters accepted by the incidents endpoint"""
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    area: Optional[str] = None
    call_category: Optional[str] = None
    call_type: Optional[str] = None
    min_priority: int = 0
    q: Optional[str] = None
    bbox: Optional[BBox] = None
    limit: int = Field(default=MAX_LIMIT, ge=0)


def parse_bbox(raw: Optional[str]) -> Optional[BBox]:
    """Parse "minLon,minLat,maxLon,maxLat"; anything malformed yields None."""
    if not raw:
        return None
    parts = raw.split(",")
    if len(parts) != 4:
        return None
    try:
        min_lon, min_lat, max_lon, max_lat = (float(p) for p in parts)
    except ValueError:
        return None
    return (min_lon, min_lat, max_lon, max_lat)


def _matches(item: NormalizedIncident, f: IncidentFilters) -> bool:
    if f.since and item.received_at < f.since:
        return False
    if f.until and item.received_at > f.until:
        return False
    if f.area and item.area != f.area:
        return False
    if f.call_category and item.call_category != f.call_category:
        return False
    if f.call_type and f.call_type.lower() not in item.call_type.lower():
        return False
    # lower number = more urgent; min_priority keeps items at least this urgent
    if f.min_priority and item.priority > f.min_priority:
        return False
    if f.q:
        haystack = f"{item.incident_id} {item.address_raw or ''} {item.call_type} {item.area or ''}".lower()
        if f.q.lower() not in haystack:
            return False
    return True


def _in_bbox(item: NormalizedIncident, bbox: BBox) -> bool:
    if item.lat is None or item.lon is None:
        return False
    min_lon, min_lat, max_lon, max_lat = bbox
    return min_lon <= item.lon <= max_lon and min_lat <= item.lat <= max_lat


def apply_filters(items: List[NormalizedIncident], f: IncidentFilters) -> List[NormalizedIncident]:
    """
    Filter, limit and spatially clip an incident list.

    The limit is applied before the bounding box.

    Args:
        items: Assembled incidents in feed order
        f: Filters

    Returns:
        Matching incidents
    """
    matched = [item for item in items if _matches(item, f)]
    limited = matched[: min(f.limit, MAX_LIMIT)]
    if f.bbox is None:
        return limited
    return [item for item in limited if _in_bbox(item, f.bbox)]
