"""
Normalization functions for Sentinel.

This module contains pure functions for converting raw feed payloads
(JSON records and HTML table rows) into NormalizedIncident models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from zoneinfo import ZoneInfo
from dateutil import parser as date_parser
from .address import is_undefined_address
from .classify import classify
from .models import NormalizedIncident, RawIncidentRecord

FEED_TZ = ZoneInfo("America/Los_Angeles")

HTML_DATE_FORMATS = (
    "%m/%d/%Y, %I:%M %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y, %I:%M:%S %p",
    "%m/%d/%Y %H:%M",
)

# logical column -> accepted header spellings (already normalized)
HEADER_ALIASES: Dict[str, Tuple[str, ...]] = {
    "incident": ("incident", "id", "incident #", "incident number"),
    "call_type": ("call type", "type", "incident type"),
    "received": ("received", "time", "call received"),
    "address": ("address", "location", "address/location", "address-location"),
    "area": ("area", "region", "station"),
    "disposition": ("disposition", "dispo", "status"),
}


@dataclass(frozen=True)
class RowParseError:
    """An HTML table row that could not be turned into an incident"""
    row_index: int
    reason: str
    raw: Dict[str, str] = field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_header(value: str) -> str:
    return " ".join(value.lower().split())


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert to aware UTC; naive values are Pacific wall-clock time."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=FEED_TZ)
    return value.astimezone(timezone.utc)


def parse_feed_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Interpret a feed timestamp as Pacific civil time.

    Args:
        value: ISO-like string without UTC offset, e.g. "2025-10-16T12:10:24"

    Returns:
        Aware UTC datetime, or None when unparseable
    """
    if not value or not value.strip():
        return None
    try:
        return to_utc(date_parser.isoparse(value.strip()))
    except (ValueError, OverflowError):
        return None


def parse_table_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse the HTML table "M/D/YYYY, h:mm A" style as Pacific time."""
    if not value:
        return None
    text = " ".join(value.split())
    for fmt in HTML_DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=FEED_TZ).astimezone(timezone.utc)
    return None


def normalize_record(raw: Union[RawIncidentRecord, Mapping[str, Any]],
                     *, now: Optional[datetime] = None) -> Optional[NormalizedIncident]:
    """
    Convert one JSON feed record into a NormalizedIncident.

    Args:
        raw: Feed record (model or plain dict)
        now: Fallback timestamp when cd_Received is unparseable

    Returns:
        Normalized incident, or None when the record has no incident id
    """
    if not isinstance(raw, RawIncidentRecord):
        raw = RawIncidentRecord.model_validate(dict(raw))

    incident_id = _clean(raw.cd_Inc_ID)
    if not incident_id:
        return None

    call_type = _clean(raw.cd_Call_Type) or ""
    address = _clean(raw.cd_Address)
    if is_undefined_address(address):
        address = None

    received_at = parse_feed_timestamp(raw.cd_Received) or now or _utcnow()
    classification = classify(call_type)

    return NormalizedIncident(
        incident_id=incident_id,
        call_type=call_type,
        call_category=classification.category,
        priority=classification.priority,
        received_at=received_at,
        address_raw=address,
        area=_clean(raw.cd_Area),
        disposition=_clean(raw.cd_Disposition),
        station=_clean(raw.cd_Station),
    )


def map_headers(headers: List[str]) -> Dict[str, int]:
    """
    Resolve table headers to logical columns through the alias table.

    Args:
        headers: Header cell texts in column order

    Returns:
        Logical column name -> column index, for the columns found
    """
    normalized = [normalize_header(h) for h in headers]
    mapping: Dict[str, int] = {}
    for column, aliases in HEADER_ALIASES.items():
        for alias in aliases:
            if alias in normalized:
                mapping[column] = normalized.index(alias)
                break
    return mapping


def has_required_headers(headers: List[str]) -> bool:
    """True when the table carries an incident-like and a call-type-like column."""
    texts = [normalize_header(h) for h in headers]
    has_incident = any("incident" in t for t in texts)
    has_call_type = any("call type" in t or "calltype" in t for t in texts)
    return has_incident and has_call_type


def parse_table_row(cells: List[str], columns: Dict[str, int], row_index: int,
                    *, now: Optional[datetime] = None) -> Union[NormalizedIncident, RowParseError]:
    """
    Build an incident from one HTML table row.

    Args:
        cells: Cell texts in column order
        columns: Output of map_headers for this table
        row_index: Position of the row in the table body
        now: Fallback timestamp

    Returns:
        NormalizedIncident, or RowParseError describing why the row was rejected
    """
    def cell(name: str) -> Optional[str]:
        idx = columns.get(name)
        if idx is None or idx >= len(cells):
            return None
        return _clean(cells[idx])

    raw = {name: (cells[idx] if idx < len(cells) else "") for name, idx in columns.items()}

    incident_id = cell("incident")
    if not incident_id:
        return RowParseError(row_index, "missing incident id", raw)
    call_type = cell("call_type")
    if not call_type:
        return RowParseError(row_index, "missing call type", raw)

    address = cell("address")
    if is_undefined_address(address):
        address = None

    classification = classify(call_type)
    return NormalizedIncident(
        incident_id=incident_id,
        call_type=call_type,
        call_category=classification.category,
        priority=classification.priority,
        received_at=parse_table_timestamp(cell("received")) or now or _utcnow(),
        address_raw=address,
        area=cell("area"),
        disposition=cell("disposition"),
    )
