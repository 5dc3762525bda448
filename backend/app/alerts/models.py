"""
models.py: Alert records raised against tracked tourists.

Alerts are immutable once created; only AlertLog membership changes.
The owning tourist is referenced by uid only, a lookup key into the
TrackingStore that may dangle if the tourist is ever removed.

Alert ids are derived from the creation time (milliseconds since the
epoch) plus a process-wide sequence number, so two alerts raised in the
same millisecond still get distinct ids. Ids support equality only.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from backend.app.tracking.models import Timestamp


class AlertType(str, Enum):
    """Kinds of alert the field devices can raise."""
    SOS        = "SOS"
    GEOFENCE   = "GeoFence"
    INACTIVITY = "Inactivity"


ALERT_TYPES = (AlertType.SOS, AlertType.GEOFENCE, AlertType.INACTIVITY)

DEFAULT_ALERT_DETAILS = (
    "Potential fall detected after 15 minutes of inactivity in a high-risk zone."
)

_sequence = itertools.count(1)


def generate_alert_id(at: Timestamp) -> str:
    millis = at.seconds * 1000 + at.nanoseconds // 1_000_000
    return f"alert-{millis}-{next(_sequence)}"


@dataclass(frozen=True)
class Alert:
    """
    A single alert.

    Attributes
    ----------
    alert_id : str
    uid : str
        Owning tourist (weak reference into the TrackingStore).
    alert_type : AlertType
    timestamp : Timestamp
    details : str
        Free-text description shown to operators and fed to the prompt.
    """
    alert_id: str
    uid: str
    alert_type: AlertType
    timestamp: Timestamp
    details: str = DEFAULT_ALERT_DETAILS

    @classmethod
    def create(
        cls,
        uid: str,
        alert_type: AlertType,
        *,
        at: Timestamp,
        details: str = DEFAULT_ALERT_DETAILS,
    ) -> "Alert":
        return cls(generate_alert_id(at), uid, alert_type, at, details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.alert_id,
            "uid": self.uid,
            "type": self.alert_type.value,
            "timestamp": self.timestamp.to_dict(),
            "details": self.details,
        }
