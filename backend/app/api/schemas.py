"""
Pydantic schemas for the dashboard API.

Separated from the route handlers so they are reusable across the
codebase (routers and tests).
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

class LatLngOut(BaseModel):
    lat: float
    lng: float


class TimestampOut(BaseModel):
    seconds: int
    nanoseconds: int


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------

class TouristSummaryOut(BaseModel):
    """Map read model: where a tourist is and how they are doing."""
    uid: str
    name: str
    location: LatLngOut
    status: Literal["safe", "warning", "alert"]
    last_updated: TimestampOut


class EmergencyContactOut(BaseModel):
    name: str
    phone: str


class HistoryEntryOut(BaseModel):
    lat: float
    lng: float
    timestamp: TimestampOut


class TouristProfileOut(TouristSummaryOut):
    age: int
    tech_comfort: Literal["low", "medium", "high"]
    medical_notes: str
    emergency_contact: EmergencyContactOut
    location_history: List[HistoryEntryOut] = Field(
        ..., description="Most-recent-last, at most HISTORY_LIMIT entries",
    )
    zones: List[str] = Field(
        default_factory=list, description="Ids of the geo-zones containing the current position",
    )


class GeoZoneOut(BaseModel):
    id: str
    name: str
    risk: Literal["high", "medium"]
    bounds: List[LatLngOut]


class StatsOut(BaseModel):
    total: int
    safe: int
    warning: int
    alert: int
    tick: int


class SimulationSettingsIn(BaseModel):
    predictive_warnings: bool = Field(
        ..., description="Derive WARNING from high-risk zone membership",
    )


class SimulationSettingsOut(BaseModel):
    predictive_warnings: bool
    tick_interval_seconds: float
    alert_probability: float


# ---------------------------------------------------------------------------
# Alerts & crisis response
# ---------------------------------------------------------------------------

class AlertOut(BaseModel):
    id: str
    uid: str
    type: Literal["SOS", "GeoFence", "Inactivity"]
    timestamp: TimestampOut
    details: str


class AlertListOut(BaseModel):
    count: int
    direction: Literal["asc", "desc"]
    alerts: List[AlertOut]


class MapFocusOut(BaseModel):
    lat: float
    lng: float
    zoom: int


class CrisisSnapshotOut(BaseModel):
    """
    Current orchestrator state.

    ``response`` is null while idle or pending, the four-section briefing
    when resolved, and ``{"error": ...}`` when failed.
    """
    state: Literal["idle", "pending", "resolved", "failed"]
    token: int
    selected_alert_id: Optional[str]
    response: Optional[Union[Dict[str, Dict[str, str]], Dict[str, str]]]
    map_focus: Optional[MapFocusOut]
