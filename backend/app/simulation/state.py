"""
state.py: Injectable simulation state container and the per-tick pipeline.

The container owns the TrackingStore, the AlertLog, the zone registry and
the random sources. It replaces ambient globals: the runner, the API and
the crisis orchestrator all receive the same instance explicitly.

═══════════════════════════════════════════════════════════════════════════
TICK PIPELINE
═══════════════════════════════════════════════════════════════════════════

One tick applies these passes in order, under a single lock:

    ┌──────────────────────┐
    │ 1. move              │  random-walk every tourist, append history
    └─────────┬────────────┘
              ▼
    ┌──────────────────────┐
    │ 2. zone status       │  safe / warning from HIGH zones (or all safe
    │                      │  when predictive warnings are off); ALERT kept
    └─────────┬────────────┘
              ▼
    ┌──────────────────────┐
    │ 3. alert override    │  maybe raise one alert → tourist pinned ALERT
    └──────────────────────┘

Because pass 3 runs last, an alert raised this tick is never undone by
pass 2 of the same tick, and pass 2 of later ticks leaves ALERT alone.

Readers (API handlers, the orchestrator) take the same lock briefly to
copy what they need; the lock is a threading.RLock because FastAPI runs
sync handlers on a worker thread pool.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np

from backend.app.alerts.alert_log import AlertLog
from backend.app.alerts.generator import AlertGenerator
from backend.app.alerts.models import Alert
from backend.app.core.config import Settings
from backend.app.spatial.zones import LatLng, ZoneRegistry
from backend.app.tracking.models import Timestamp
from backend.app.tracking.simulator import (
    PositionSimulator,
    apply_zone_status,
    seed_tourists,
)
from backend.app.tracking.store import TrackingStore

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Outcome of one tick."""
    tick: int
    at: Timestamp
    moved: int = 0
    warnings: int = 0
    alert: Optional[Alert] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "at": self.at.to_dict(),
            "moved": self.moved,
            "warnings": self.warnings,
            "alert_id": self.alert.alert_id if self.alert else None,
            "duration_ms": round(self.duration_ms, 3),
        }


TickPass = Callable[["SimulationState", TickReport], None]


def move_pass(state: "SimulationState", report: TickReport) -> None:
    report.moved = state.simulator.advance(state.store, report.at)


def zone_status_pass(state: "SimulationState", report: TickReport) -> None:
    report.warnings = apply_zone_status(
        state.store, state.zones.high_risk(), state.predictive_warnings,
    )


def alert_override_pass(state: "SimulationState", report: TickReport) -> None:
    report.alert = state.generator.maybe_generate(state.store, state.alert_log, report.at)


TICK_PIPELINE: Tuple[TickPass, ...] = (move_pass, zone_status_pass, alert_override_pass)


class SimulationState:
    """
    Owned, injectable container for all mutable simulation state.

    Usage:
        state = SimulationState.from_settings(settings)
        report = state.tick()
        with state.lock:
            counts = state.store.status_counts()
    """

    def __init__(
        self,
        store: TrackingStore,
        alert_log: AlertLog,
        zones: ZoneRegistry,
        simulator: PositionSimulator,
        generator: AlertGenerator,
        *,
        predictive_warnings: bool = True,
        tick_interval_seconds: float = 3.0,
        pipeline: Tuple[TickPass, ...] = TICK_PIPELINE,
    ):
        self.store = store
        self.alert_log = alert_log
        self.zones = zones
        self.simulator = simulator
        self.generator = generator
        self.pipeline = pipeline
        self.tick_interval_seconds = tick_interval_seconds
        self.lock = threading.RLock()
        self.tick_count = 0
        self.last_tick: Optional[TickReport] = None
        self._predictive_warnings = predictive_warnings

    @classmethod
    def from_settings(cls, settings: Settings) -> "SimulationState":
        """Build a fully seeded state from configuration."""
        rng = np.random.RandomState(settings.SIMULATION_SEED)
        tourists = seed_tourists(
            settings.TOURIST_COUNT,
            rng,
            center=LatLng(settings.REGION_CENTER_LAT, settings.REGION_CENTER_LNG),
            spread_deg=settings.REGION_SPREAD_DEG,
        )
        return cls(
            TrackingStore(tourists, history_limit=settings.HISTORY_LIMIT),
            AlertLog(settings.ALERT_LOG_LIMIT),
            ZoneRegistry(),
            PositionSimulator(rng, settings.POSITION_JITTER_DEG),
            AlertGenerator(rng, settings.ALERT_PROBABILITY),
            predictive_warnings=settings.PREDICTIVE_WARNINGS,
            tick_interval_seconds=settings.TICK_INTERVAL_SECONDS,
        )

    # ── Settings ──

    @property
    def predictive_warnings(self) -> bool:
        return self._predictive_warnings

    def set_predictive_warnings(self, enabled: bool) -> None:
        """Takes effect on the next tick."""
        with self.lock:
            if enabled != self._predictive_warnings:
                logger.info("Predictive warnings %s", "enabled" if enabled else "disabled")
            self._predictive_warnings = enabled

    # ── Tick ──

    def tick(self, at: Optional[Timestamp] = None) -> TickReport:
        """Run every pass of the pipeline once, atomically."""
        start = time.perf_counter()
        with self.lock:
            self.tick_count += 1
            report = TickReport(tick=self.tick_count, at=at or Timestamp.now())
            for step in self.pipeline:
                step(self, report)
            report.duration_ms = (time.perf_counter() - start) * 1000
            self.last_tick = report

        logger.debug(
            "Tick %d: moved=%d warnings=%d alert=%s (%.2fms)",
            report.tick, report.moved, report.warnings,
            report.alert.alert_id if report.alert else None, report.duration_ms,
            extra={"tick": report.tick, "duration_ms": report.duration_ms},
        )
        return report
