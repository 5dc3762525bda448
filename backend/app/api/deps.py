"""
Request-scoped accessors for the objects wired up in the app lifespan.
"""

from __future__ import annotations

from fastapi import Request

from backend.app.crisis.orchestrator import CrisisResponseOrchestrator
from backend.app.simulation.state import SimulationState


def get_simulation(request: Request) -> SimulationState:
    return request.app.state.simulation


def get_orchestrator(request: Request) -> CrisisResponseOrchestrator:
    return request.app.state.orchestrator
