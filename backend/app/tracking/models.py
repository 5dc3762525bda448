"""
models.py: Data structures for tracked tourists.

Defines:
    • Timestamp       - epoch seconds + nanosecond fraction
    • TouristStatus   - safe / warning / alert
    • TechComfort     - self-reported device familiarity
    • EmergencyContact, TouristProfile - static profile data
    • HistoryEntry    - one recorded position fix
    • Tourist         - the tracked entity owned by the TrackingStore

═══════════════════════════════════════════════════════════════════════════
STATUS RULES
═══════════════════════════════════════════════════════════════════════════

    Current     Predictive   Inside HIGH zone   Next status
    ─────────   ──────────   ────────────────   ───────────
    alert       any          any                alert  (sticky)
    safe/warn   on           yes                warning
    safe/warn   on           no                 safe
    safe/warn   off          (not evaluated)    safe

Only the alert generator moves a tourist INTO ``alert``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from backend.app.spatial.zones import LatLng


class TouristStatus(str, Enum):
    """Tracking status shown on the map marker."""
    SAFE    = "safe"
    WARNING = "warning"
    ALERT   = "alert"


class TechComfort(str, Enum):
    LOW    = "low"
    MEDIUM = "medium"
    HIGH   = "high"


@dataclass(frozen=True, order=True)
class Timestamp:
    """Wall-clock instant split as (seconds, nanoseconds) since the epoch."""
    seconds: int
    nanoseconds: int = 0

    @classmethod
    def now(cls) -> "Timestamp":
        ns = time.time_ns()
        return cls(ns // 1_000_000_000, ns % 1_000_000_000)

    def as_float(self) -> float:
        return self.seconds + self.nanoseconds / 1e9

    def to_dict(self) -> Dict[str, int]:
        return {"seconds": self.seconds, "nanoseconds": self.nanoseconds}


@dataclass(frozen=True)
class EmergencyContact:
    name: str
    phone: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "phone": self.phone}


@dataclass(frozen=True)
class TouristProfile:
    """Static profile captured at registration."""
    age: int
    tech_comfort: TechComfort
    medical_notes: str
    emergency_contact: EmergencyContact

    def to_dict(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "tech_comfort": self.tech_comfort.value,
            "medical_notes": self.medical_notes,
            "emergency_contact": self.emergency_contact.to_dict(),
        }


@dataclass(frozen=True)
class HistoryEntry:
    position: LatLng
    timestamp: Timestamp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.position.lat,
            "lng": self.position.lng,
            "timestamp": self.timestamp.to_dict(),
        }


@dataclass
class Tourist:
    """
    A tracked tourist.

    Attributes
    ----------
    uid : str
        Opaque, stable identifier (e.g. ``tourist-id-3``).
    name : str
    position : LatLng
        Latest position fix.
    last_updated : Timestamp
    status : TouristStatus
    profile : TouristProfile
    history : list of HistoryEntry
        Most-recent-last; length is capped by the owning store.
    """
    uid: str
    name: str
    position: LatLng
    last_updated: Timestamp
    profile: TouristProfile
    status: TouristStatus = TouristStatus.SAFE
    history: List[HistoryEntry] = field(default_factory=list)

    @property
    def is_alerted(self) -> bool:
        return self.status == TouristStatus.ALERT

    def summary_dict(self) -> Dict[str, Any]:
        """Map read model: position + status only."""
        return {
            "uid": self.uid,
            "name": self.name,
            "location": self.position.to_dict(),
            "status": self.status.value,
            "last_updated": self.last_updated.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.summary_dict(),
            **self.profile.to_dict(),
            "location_history": [h.to_dict() for h in self.history],
        }
