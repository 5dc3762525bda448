"""
store.py: Authoritative in-memory collection of tracked tourists.

The store exclusively owns Tourist records and their position history.
It performs no locking itself; callers serialise mutations through the
SimulationState lock (single writer per tick, many readers).

All mutators are total: unknown ids are reported through the return
value instead of raising, so a tick never fails halfway through.
"""

from __future__ import annotations

import copy
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from backend.app.spatial.zones import LatLng
from backend.app.tracking.models import (
    HistoryEntry,
    Timestamp,
    Tourist,
    TouristStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class TrackingStore:
    """
    Ordered uid → Tourist mapping with bounded position history.

    Usage:
        store = TrackingStore(history_limit=10)
        store.add(tourist)
        store.record_position("tourist-id-0", LatLng(30.1, 78.3), Timestamp.now())
        store.set_status("tourist-id-0", TouristStatus.WARNING)
    """

    def __init__(
        self,
        tourists: Iterable[Tourist] = (),
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        if history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {history_limit}")
        self.history_limit = history_limit
        self._tourists: Dict[str, Tourist] = {}
        for tourist in tourists:
            self.add(tourist)

    # ── Membership ──

    def add(self, tourist: Tourist) -> None:
        if tourist.uid in self._tourists:
            raise ValueError(f"Duplicate tourist uid: {tourist.uid}")
        del tourist.history[:-self.history_limit]
        self._tourists[tourist.uid] = tourist

    def get(self, uid: str) -> Optional[Tourist]:
        return self._tourists.get(uid)

    def __contains__(self, uid: object) -> bool:
        return uid in self._tourists

    def __iter__(self) -> Iterator[Tourist]:
        return iter(list(self._tourists.values()))

    def __len__(self) -> int:
        return len(self._tourists)

    # ── Mutation ──

    def record_position(self, uid: str, position: LatLng, at: Timestamp) -> bool:
        """
        Move a tourist and append the fix to its history.

        The oldest entries are evicted so history never exceeds
        ``history_limit``. Returns False for an unknown uid.
        """
        tourist = self._tourists.get(uid)
        if tourist is None:
            return False
        tourist.position = position
        tourist.last_updated = at
        tourist.history.append(HistoryEntry(position, at))
        del tourist.history[:-self.history_limit]
        return True

    def set_status(self, uid: str, status: TouristStatus) -> bool:
        tourist = self._tourists.get(uid)
        if tourist is None:
            return False
        if tourist.status != status:
            logger.debug(
                "Status %s → %s", tourist.status.value, status.value,
                extra={"tourist_id": uid},
            )
        tourist.status = status
        return True

    # ── Read models ──

    def snapshot(self, uid: str) -> Optional[Tourist]:
        """Deep copy of one tourist, safe to hand to another task."""
        tourist = self._tourists.get(uid)
        return copy.deepcopy(tourist) if tourist is not None else None

    def not_alerted(self) -> List[Tourist]:
        return [t for t in self._tourists.values() if not t.is_alerted]

    def search(self, term: str = "") -> List[Tourist]:
        """Case-insensitive substring match on name or uid."""
        needle = term.strip().lower()
        if not needle:
            return list(self._tourists.values())
        return [
            t for t in self._tourists.values()
            if needle in t.name.lower() or needle in t.uid.lower()
        ]

    def status_counts(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in TouristStatus}
        for tourist in self._tourists.values():
            counts[tourist.status.value] += 1
        return {"total": len(self._tourists), **counts}
