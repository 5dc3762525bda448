"""
alert_log.py: Bounded, most-recent-first collection of alerts.

    index 0          newest alert
    index len-1      oldest retained alert
    capacity         ALERT_LOG_LIMIT (default 50); overflow evicts oldest
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from backend.app.alerts.models import Alert

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 50


class AlertLog:
    """Ordered alert log. Not thread-safe; guarded by the SimulationState lock."""

    def __init__(self, limit: int = DEFAULT_LOG_LIMIT):
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit
        self._alerts: List[Alert] = []

    def prepend(self, alert: Alert) -> List[Alert]:
        """
        Insert ``alert`` at the head and truncate to capacity.

        Returns the evicted alerts (oldest last), usually empty.
        """
        self._alerts.insert(0, alert)
        evicted = self._alerts[self.limit:]
        del self._alerts[self.limit:]
        if evicted:
            logger.debug("Alert log full, evicted %d oldest", len(evicted))
        return evicted

    def get(self, alert_id: str) -> Optional[Alert]:
        for alert in self._alerts:
            if alert.alert_id == alert_id:
                return alert
        return None

    def latest(self) -> Optional[Alert]:
        return self._alerts[0] if self._alerts else None

    def sorted(self, direction: str = "desc") -> List[Alert]:
        """Alerts ordered by timestamp; ``direction`` is 'asc' or 'desc'."""
        if direction not in ("asc", "desc"):
            raise ValueError(f"direction must be 'asc' or 'desc', got {direction!r}")
        # Log order breaks timestamp ties: newer insertions stay first in desc
        return sorted(
            self._alerts,
            key=lambda a: a.timestamp,
            reverse=(direction == "desc"),
        )

    def __iter__(self) -> Iterator[Alert]:
        return iter(list(self._alerts))

    def __len__(self) -> int:
        return len(self._alerts)
