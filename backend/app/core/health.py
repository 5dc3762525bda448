"""
Health check aggregation: component checks for the dashboard backend.

Checks:
    • Simulation runner (task alive, last tick not older than a few intervals)
    • Tracking store (tourists seeded, alert log fill)
    • Generation service (API key configured)

Returns a structured health report suitable for:
    - Kubernetes liveness/readiness checks
    - Load balancer health checks
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from backend.app.core.config import Settings, settings
from backend.app.tracking.models import Timestamp

if TYPE_CHECKING:
    from backend.app.crisis.gemini_client import GeminiClient
    from backend.app.simulation.runner import SimulationRunner
    from backend.app.simulation.state import SimulationState

logger = logging.getLogger(__name__)

# A runner that missed this many intervals is considered stalled
STALL_INTERVALS = 3


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"  # partial functionality
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    name: str
    status: HealthStatus = HealthStatus.HEALTHY
    latency_ms: float = 0.0
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            d["message"] = self.message
        if self.details:
            d["details"] = self.details
        return d


@dataclass
class HealthReport:
    status: HealthStatus = HealthStatus.HEALTHY
    version: str = ""
    environment: str = ""
    timestamp: str = ""
    uptime_seconds: float = 0.0
    components: List[ComponentHealth] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "version": self.version,
            "environment": self.environment,
            "timestamp": self.timestamp or datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(self.uptime_seconds, 1),
            "components": [c.to_dict() for c in self.components],
        }


_start_time = time.monotonic()


def check_simulation_runner(
    state: "SimulationState",
    runner: Optional["SimulationRunner"],
) -> ComponentHealth:
    """Is the tick loop alive and recent?"""
    comp = ComponentHealth(name="simulation_runner")
    start = time.monotonic()

    last = state.last_tick
    comp.details = {"tick_count": state.tick_count}

    if runner is None or not runner.is_running:
        comp.status = HealthStatus.UNHEALTHY
        comp.message = "Simulation runner not running"
    elif last is None:
        # No tick yet right after startup
        comp.status = HealthStatus.HEALTHY
        comp.message = "Waiting for first tick"
    else:
        age = Timestamp.now().as_float() - last.at.as_float()
        comp.details["last_tick_age_seconds"] = round(age, 1)
        if age > STALL_INTERVALS * runner.interval_seconds:
            comp.status = HealthStatus.DEGRADED
            comp.message = f"Last tick {age:.1f}s ago"
        else:
            comp.message = f"Ticking every {runner.interval_seconds:.1f}s"

    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def check_tracking_store(state: "SimulationState") -> ComponentHealth:
    comp = ComponentHealth(name="tracking_store")
    start = time.monotonic()

    with state.lock:
        counts = state.store.status_counts()
        log_size = len(state.alert_log)
        log_limit = state.alert_log.limit

    comp.details = {**counts, "alert_log": f"{log_size}/{log_limit}"}
    if counts["total"] == 0:
        comp.status = HealthStatus.DEGRADED
        comp.message = "No tourists registered"
    else:
        comp.message = f"{counts['total']} tourists tracked"

    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def check_generation_service(client: Optional["GeminiClient"]) -> ComponentHealth:
    """Configuration check only; no request is sent."""
    comp = ComponentHealth(name="generation_service")
    start = time.monotonic()

    if client is None or not client.is_configured:
        comp.status = HealthStatus.DEGRADED
        comp.message = "GEMINI_API_KEY not set; crisis responses will fail"
    else:
        comp.message = "Generation service configured"
        comp.details = {"model": client.model}

    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


async def run_health_check(
    state: "SimulationState",
    runner: Optional["SimulationRunner"] = None,
    client: Optional["GeminiClient"] = None,
    app_settings: Settings = settings,
) -> HealthReport:
    """Run all health checks and aggregate into a report."""
    report = HealthReport(
        version=app_settings.APP_VERSION,
        environment=app_settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=time.monotonic() - _start_time,
    )

    report.components = [
        check_simulation_runner(state, runner),
        check_tracking_store(state),
        check_generation_service(client),
    ]

    statuses = [c.status for c in report.components]
    if HealthStatus.UNHEALTHY in statuses:
        report.status = HealthStatus.UNHEALTHY
    elif HealthStatus.DEGRADED in statuses:
        report.status = HealthStatus.DEGRADED
    else:
        report.status = HealthStatus.HEALTHY

    if report.status != HealthStatus.HEALTHY:
        logger.debug("Health check: %s", report.status.value)
    return report
