"""
FastAPI route: live tracking read models and simulation settings.

Provides endpoints to:
    GET /api/v1/tracking/tourists          - positions + statuses (optional search)
    GET /api/v1/tracking/tourists/{uid}    - full profile with position history
    GET /api/v1/tracking/zones             - geo-zone polygons
    GET /api/v1/tracking/stats             - status counts for the stats bar
    GET /api/v1/tracking/settings          - current simulation settings
    PUT /api/v1/tracking/settings          - toggle predictive warnings
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from backend.app.api.deps import get_simulation
from backend.app.api.schemas import (
    GeoZoneOut,
    SimulationSettingsIn,
    SimulationSettingsOut,
    StatsOut,
    TouristProfileOut,
    TouristSummaryOut,
)
from backend.app.core.errors import NotFoundError
from backend.app.simulation.state import SimulationState
from backend.app.spatial.geofence import zones_containing

router = APIRouter(prefix="/api/v1/tracking", tags=["tracking"])


@router.get(
    "/tourists",
    response_model=List[TouristSummaryOut],
    summary="Current tourist positions and statuses",
)
def list_tourists(
    search: str = Query("", description="Case-insensitive match on name or uid"),
    sim: SimulationState = Depends(get_simulation),
):
    with sim.lock:
        return [t.summary_dict() for t in sim.store.search(search)]


@router.get(
    "/tourists/{uid}",
    response_model=TouristProfileOut,
    summary="Tourist profile with recent location history",
)
def get_tourist(uid: str, sim: SimulationState = Depends(get_simulation)):
    with sim.lock:
        tourist = sim.store.get(uid)
        if tourist is None:
            raise NotFoundError("Tourist", uid=uid)
        inside = zones_containing(tourist.position, sim.zones)
        return {**tourist.to_dict(), "zones": [z.zone_id for z in inside]}


@router.get("/zones", response_model=List[GeoZoneOut], summary="Geo-zone polygons")
def list_zones(sim: SimulationState = Depends(get_simulation)):
    return [z.to_dict() for z in sim.zones]


@router.get("/stats", response_model=StatsOut, summary="Tourist counts by status")
def get_stats(sim: SimulationState = Depends(get_simulation)):
    with sim.lock:
        return {**sim.store.status_counts(), "tick": sim.tick_count}


def _settings_view(sim: SimulationState) -> dict:
    return {
        "predictive_warnings": sim.predictive_warnings,
        "tick_interval_seconds": sim.tick_interval_seconds,
        "alert_probability": sim.generator.probability,
    }


@router.get("/settings", response_model=SimulationSettingsOut)
def get_simulation_settings(sim: SimulationState = Depends(get_simulation)):
    return _settings_view(sim)


@router.put(
    "/settings",
    response_model=SimulationSettingsOut,
    summary="Toggle predictive warnings",
    description="Disabling forces every non-alert tourist to safe on the next tick.",
)
def update_simulation_settings(
    body: SimulationSettingsIn,
    sim: SimulationState = Depends(get_simulation),
):
    sim.set_predictive_warnings(body.predictive_warnings)
    return _settings_view(sim)
