"""
FastAPI route: Current crisis response.

    GET /api/v1/crisis/response   - orchestrator state + current artifact
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_orchestrator
from backend.app.api.schemas import CrisisSnapshotOut
from backend.app.crisis.orchestrator import CrisisResponseOrchestrator

router = APIRouter(prefix="/api/v1/crisis", tags=["crisis-response"])


@router.get(
    "/response",
    response_model=CrisisSnapshotOut,
    summary="Current crisis response",
    description=(
        "state is one of idle / pending / resolved / failed. Results of "
        "superseded selections never appear here."
    ),
)
async def get_crisis_response(
    orchestrator: CrisisResponseOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.snapshot()
