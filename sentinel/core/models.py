"""
Core domain models for Sentinel.

This module defines the incident and geocoding models using Pydantic v2
for type safety and validation.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator

Category = Literal[
    "violent",
    "weapons",
    "property",
    "traffic",
    "disturbance",
    "drug",
    "medical",
    "admin",
    "other",
]

Provider = Literal["apple_maps", "census", "nominatim"]


class Classification(BaseModel):
    """Category and priority assigned to a call type"""
    model_config = ConfigDict(frozen=True)

    category: Category
    priority: int


class RawIncidentRecord(BaseModel):
    """One record as served by the PressAccess JSON feed"""
    model_config = ConfigDict(extra="allow")

    cd_Inc_ID: Optional[str] = None
    cd_Call_Type: Optional[str] = None
    cd_Received: Optional[str] = None
    cd_Address: Optional[str] = None
    cd_Area: Optional[str] = None
    cd_Disposition: Optional[str] = None
    cd_Station: Optional[str] = None


class GeocodeSuccess(BaseModel):
    """Coordinates returned by one provider"""
    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    lat: float
    lon: float
    approximate: bool = False
    strategy: Provider
    centroid_used: Optional[str] = None
    query: Optional[str] = None
    user_location: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "approximate": self.approximate,
            "strategy": self.strategy,
            "centroid_used": self.centroid_used,
            "error": None,
            "query": self.query,
            "user_location": self.user_location,
        }


class GeocodeFailure(BaseModel):
    """No provider produced coordinates"""
    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    error: str
    query: Optional[str] = None
    user_location: Optional[str] = None
    centroid_used: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def lat(self) -> None:
        return None

    @property
    def lon(self) -> None:
        return None

    @property
    def approximate(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": None,
            "lon": None,
            "approximate": False,
            "strategy": None,
            "centroid_used": self.centroid_used,
            "error": self.error,
            "query": self.query,
            "user_location": self.user_location,
        }


GeocodeResult = Annotated[Union[GeocodeSuccess, GeocodeFailure], Field(discriminator="status")]


class NormalizedIncident(BaseModel):
    """Normalized, classified dispatch record"""

    incident_id: str
    call_type: str
    call_category: Category
    priority: int
    received_at: datetime
    address_raw: Optional[str] = None
    area: Optional[str] = None
    disposition: Optional[str] = None
    station: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    location_approximate: bool = False

    @model_validator(mode="after")
    def _coordinates_paired(self) -> "NormalizedIncident":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must both be set or both be null")
        return self

    def attach_geocode(self, result: Union[GeocodeSuccess, GeocodeFailure]) -> None:
        """
        Copy a geocode outcome onto the incident.

        Args:
            result: Resolver output for this incident's address
        """
        if isinstance(result, GeocodeSuccess):
            self.lat = result.lat
            self.lon = result.lon
            self.location_approximate = result.approximate
        else:
            self.lat = None
            self.lon = None
            self.location_approximate = False
