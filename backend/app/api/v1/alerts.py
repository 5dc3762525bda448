"""
FastAPI route: Alert log and alert selection.

Provides endpoints to:
    GET  /api/v1/alerts                   - alert log, sorted by time
    GET  /api/v1/alerts/{id}              - a single alert
    POST /api/v1/alerts/{id}/select       - select an alert, start its crisis briefing
    POST /api/v1/alerts/selection/clear   - deselect
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from backend.app.api.deps import get_orchestrator, get_simulation
from backend.app.api.schemas import AlertListOut, AlertOut, CrisisSnapshotOut
from backend.app.core.errors import NotFoundError, ValidationError
from backend.app.crisis.orchestrator import CrisisResponseOrchestrator
from backend.app.simulation.state import SimulationState

router = APIRouter(prefix="/api/v1/alerts", tags=["alerts"])

SORT_DIRECTIONS = ("asc", "desc")


@router.get(
    "",
    response_model=AlertListOut,
    summary="Alert log",
    description="Newest first by default; the log keeps at most ALERT_LOG_LIMIT alerts.",
)
def list_alerts(
    direction: str = Query("desc", description="asc or desc"),
    sim: SimulationState = Depends(get_simulation),
):
    if direction not in SORT_DIRECTIONS:
        raise ValidationError(
            f"direction must be 'asc' or 'desc', got {direction!r}",
            field="direction",
        )
    with sim.lock:
        alerts = sim.alert_log.sorted(direction)
    return {
        "count": len(alerts),
        "direction": direction,
        "alerts": [a.to_dict() for a in alerts],
    }


@router.post(
    "/selection/clear",
    response_model=CrisisSnapshotOut,
    summary="Clear the selected alert",
)
async def clear_selection(
    orchestrator: CrisisResponseOrchestrator = Depends(get_orchestrator),
):
    orchestrator.clear()
    return orchestrator.snapshot()


@router.get("/{alert_id}", response_model=AlertOut, summary="Get one alert")
def get_alert(alert_id: str, sim: SimulationState = Depends(get_simulation)):
    with sim.lock:
        alert = sim.alert_log.get(alert_id)
    if alert is None:
        raise NotFoundError("Alert", alert_id=alert_id)
    return alert.to_dict()


@router.post(
    "/{alert_id}/select",
    response_model=CrisisSnapshotOut,
    summary="Select an alert",
    description=(
        "Starts crisis response generation for the alert and returns immediately "
        "in the pending state, with a map focus on the tourist's position. "
        "Poll GET /api/v1/crisis/response for the outcome."
    ),
)
async def select_alert(
    alert_id: str,
    sim: SimulationState = Depends(get_simulation),
    orchestrator: CrisisResponseOrchestrator = Depends(get_orchestrator),
):
    with sim.lock:
        alert = sim.alert_log.get(alert_id)
        owner_known = alert is not None and alert.uid in sim.store
    if alert is None:
        raise NotFoundError("Alert", alert_id=alert_id)
    if not owner_known:
        raise NotFoundError("Tourist", uid=alert.uid)

    orchestrator.select(alert_id)
    return orchestrator.snapshot()
