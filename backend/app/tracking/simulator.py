"""
simulator.py: Simulated GPS feed and geofence-derived status.

There is no device ingestion; every tick each tourist takes a small
random step and the fix is written into the TrackingStore.

═══════════════════════════════════════════════════════════════════════════
RANDOM WALK
═══════════════════════════════════════════════════════════════════════════

Each axis moves independently:

    Δ = (u − 0.5) · 2 · jitter_deg,   u ~ U[0, 1)

With the default jitter of 0.001° the step is at most ~110 m north/south,
which keeps tourists inside the trekking region for hours of simulation.

═══════════════════════════════════════════════════════════════════════════
SEED POPULATION
═══════════════════════════════════════════════════════════════════════════

    uid               tourist-id-{i}
    name              roster[i mod 20]
    age               20 … 59
    tech comfort      low / medium / high, cycling with i
    medical notes     "Allergy: Sulfa Drugs" (20 %) else "None"
    emergency contact Rohan <surname>, +91 98765 432{i:02d}
    start position    region centre ± spread/2 on each axis
"""

from __future__ import annotations

import logging
from typing import Iterable, List

import numpy as np

from backend.app.spatial.geofence import is_in_high_risk_zone
from backend.app.spatial.zones import GeoZone, LatLng
from backend.app.tracking.models import (
    EmergencyContact,
    HistoryEntry,
    TechComfort,
    Timestamp,
    Tourist,
    TouristProfile,
    TouristStatus,
)
from backend.app.tracking.store import TrackingStore

logger = logging.getLogger(__name__)


NAME_ROSTER = (
    "Aarav Sharma", "Vivaan Singh", "Aditya Kumar", "Vihaan Gupta",
    "Arjun Patel", "Sai Joshi", "Reyansh Reddy", "Ayaan Verma",
    "Krishna Nair", "Ishaan Khan", "Saanvi Devi", "Aanya Mehta",
    "Aadhya Mishra", "Myra Agarwal", "Ananya Jain", "Pari Shah",
    "Diya Kumar", "Riya Singh", "Siya Patel", "Anika Gupta",
)

TECH_COMFORT_CYCLE = (TechComfort.LOW, TechComfort.MEDIUM, TechComfort.HIGH)
MEDICAL_NOTE_PROBABILITY = 0.2
MEDICAL_NOTE = "Allergy: Sulfa Drugs"


def seed_tourists(
    count: int,
    rng: np.random.RandomState,
    *,
    center: LatLng,
    spread_deg: float,
) -> List[Tourist]:
    """
    Build the initial tourist population.

    Parameters
    ----------
    count : int
        Number of tourists.
    rng : numpy.random.RandomState
        Source of randomness (seed it for reproducible runs).
    center : LatLng
        Centre of the trekking region.
    spread_deg : float
        Full width of the square start area, in degrees.

    Returns
    -------
    list of Tourist
        All with status SAFE and a one-entry history.
    """
    now = Timestamp.now()
    tourists: List[Tourist] = []

    for i in range(count):
        name = NAME_ROSTER[i % len(NAME_ROSTER)]
        surname = name.split(" ")[1]
        start = LatLng(
            center.lat + (rng.random_sample() - 0.5) * spread_deg,
            center.lng + (rng.random_sample() - 0.5) * spread_deg,
        )
        profile = TouristProfile(
            age=20 + int(rng.randint(0, 40)),
            tech_comfort=TECH_COMFORT_CYCLE[i % len(TECH_COMFORT_CYCLE)],
            medical_notes=(
                MEDICAL_NOTE
                if rng.random_sample() < MEDICAL_NOTE_PROBABILITY else "None"
            ),
            emergency_contact=EmergencyContact(
                name=f"Rohan {surname}",
                phone=f"+91 98765 432{i:02d}",
            ),
        )
        tourists.append(Tourist(
            uid=f"tourist-id-{i}",
            name=name,
            position=start,
            last_updated=now,
            profile=profile,
            history=[HistoryEntry(start, now)],
        ))

    logger.info("Seeded %d tourists around (%.4f, %.4f)", count, center.lat, center.lng)
    return tourists


def derive_status(
    current: TouristStatus,
    position: LatLng,
    zones: Iterable[GeoZone],
    predictive_warnings: bool,
) -> TouristStatus:
    """
    Apply the status rules from ``tracking.models``.

    ALERT is returned unchanged. With predictive warnings off the
    geofence is not evaluated at all.
    """
    if current == TouristStatus.ALERT:
        return current
    if not predictive_warnings:
        return TouristStatus.SAFE
    if is_in_high_risk_zone(position, zones):
        return TouristStatus.WARNING
    return TouristStatus.SAFE


class PositionSimulator:
    """
    Random-walk position feed.

    Usage:
        sim = PositionSimulator(np.random.RandomState(7), jitter_deg=0.001)
        sim.advance(store, Timestamp.now())
    """

    def __init__(self, rng: np.random.RandomState, jitter_deg: float = 0.001):
        if jitter_deg < 0:
            raise ValueError(f"jitter_deg must be >= 0, got {jitter_deg}")
        self.rng = rng
        self.jitter_deg = jitter_deg

    def step(self, position: LatLng) -> LatLng:
        """One independent uniform step per axis."""
        span = 2.0 * self.jitter_deg
        return LatLng(
            position.lat + (self.rng.random_sample() - 0.5) * span,
            position.lng + (self.rng.random_sample() - 0.5) * span,
        )

    def advance(self, store: TrackingStore, at: Timestamp) -> int:
        """Move every tourist once. Returns the number moved."""
        moved = 0
        for tourist in store:
            store.record_position(tourist.uid, self.step(tourist.position), at)
            moved += 1
        return moved


def apply_zone_status(
    store: TrackingStore,
    zones: Iterable[GeoZone],
    predictive_warnings: bool,
) -> int:
    """
    Re-derive every tourist's status from its current position.

    Returns the number of tourists now in WARNING.
    """
    zones = list(zones)
    warnings = 0
    for tourist in store:
        status = derive_status(tourist.status, tourist.position, zones, predictive_warnings)
        store.set_status(tourist.uid, status)
        if status == TouristStatus.WARNING:
            warnings += 1
    return warnings
