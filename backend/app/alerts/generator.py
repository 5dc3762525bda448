"""
generator.py: Probabilistic alert creation.

Runs on the simulation tick, after the geofence status pass:

    1. With probability p (default 0.1) decide to raise an alert
    2. Pick one tourist uniformly among those not already in ALERT
       (none available → no-op)
    3. Pick the alert type uniformly from SOS / GeoFence / Inactivity
    4. Prepend the alert to the AlertLog (capacity enforced there)
    5. Set the tourist's status to ALERT (sticky)

Running after the status pass is what makes ALERT win within a tick.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from backend.app.alerts.alert_log import AlertLog
from backend.app.alerts.models import ALERT_TYPES, Alert, AlertType
from backend.app.tracking.models import Timestamp, TouristStatus
from backend.app.tracking.store import TrackingStore

logger = logging.getLogger(__name__)


class AlertGenerator:
    """
    Usage:
        gen = AlertGenerator(np.random.RandomState(3), probability=0.1)
        alert = gen.maybe_generate(store, log, Timestamp.now())
    """

    def __init__(self, rng: np.random.RandomState, probability: float = 0.1):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be in [0, 1], got {probability}")
        self.rng = rng
        self.probability = probability

    def maybe_generate(
        self,
        store: TrackingStore,
        log: AlertLog,
        at: Timestamp,
    ) -> Optional[Alert]:
        """Roll once; on success raise an alert against a random tourist."""
        if self.rng.random_sample() >= self.probability:
            return None

        candidates = store.not_alerted()
        if not candidates:
            logger.debug("Alert roll succeeded but every tourist is already on alert")
            return None

        tourist = candidates[self.rng.randint(len(candidates))]
        alert_type = ALERT_TYPES[self.rng.randint(len(ALERT_TYPES))]
        return raise_alert(store, log, tourist.uid, alert_type, at=at)


def raise_alert(
    store: TrackingStore,
    log: AlertLog,
    uid: str,
    alert_type: AlertType,
    *,
    at: Timestamp,
) -> Alert:
    """Record an alert for ``uid`` and pin the tourist to ALERT."""
    alert = Alert.create(uid, alert_type, at=at)
    log.prepend(alert)
    store.set_status(uid, TouristStatus.ALERT)
    logger.info(
        "%s alert raised", alert_type.value,
        extra={"alert_id": alert.alert_id, "tourist_id": uid, "alert_type": alert_type.value},
    )
    return alert
