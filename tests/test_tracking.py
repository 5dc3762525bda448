"""
test_tracking.py: Tests for tourist models, the tracking store and the
simulated position feed.

Covers:
    • Timestamp ordering and serialisation
    • TrackingStore history cap, status updates, search, counts
    • Seed population
    • Random walk bounds
    • Status derivation (predictive on/off, sticky ALERT)

Run with:
    pytest tests/test_tracking.py -v
"""

from __future__ import annotations

import numpy as np
import pytest

from backend.app.spatial.zones import DEFAULT_ZONES, LatLng
from backend.app.tracking.models import (
    EmergencyContact,
    TechComfort,
    Timestamp,
    Tourist,
    TouristProfile,
    TouristStatus,
)
from backend.app.tracking.simulator import (
    NAME_ROSTER,
    PositionSimulator,
    apply_zone_status,
    derive_status,
    seed_tourists,
)
from backend.app.tracking.store import TrackingStore


# ═══════════════════════════════════════════════════════════════════════════
# Test Fixtures
# ═══════════════════════════════════════════════════════════════════════════

AVALANCHE_POINT = LatLng(31.07, 78.90)
TRAILHEAD = LatLng(30.0869, 78.2676)


def _make_tourist(
    uid: str = "tourist-id-0",
    name: str = "Aarav Sharma",
    position: LatLng = TRAILHEAD,
    status: TouristStatus = TouristStatus.SAFE,
) -> Tourist:
    return Tourist(
        uid=uid,
        name=name,
        position=position,
        last_updated=Timestamp(1_700_000_000),
        profile=TouristProfile(
            age=34,
            tech_comfort=TechComfort.MEDIUM,
            medical_notes="None",
            emergency_contact=EmergencyContact("Rohan Sharma", "+91 98765 43200"),
        ),
        status=status,
    )


def _ts(i: int) -> Timestamp:
    return Timestamp(1_700_000_000 + i)


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: Models
# ═══════════════════════════════════════════════════════════════════════════

class TestTimestamp:

    def test_ordering(self):
        assert Timestamp(10, 5) < Timestamp(10, 6) < Timestamp(11, 0)

    def test_as_float(self):
        assert Timestamp(2, 500_000_000).as_float() == pytest.approx(2.5)

    def test_now_fields(self):
        ts = Timestamp.now()
        assert ts.seconds > 1_600_000_000
        assert 0 <= ts.nanoseconds < 1_000_000_000


class TestTourist:

    def test_summary_dict(self):
        d = _make_tourist().summary_dict()
        assert d["uid"] == "tourist-id-0"
        assert d["location"] == {"lat": TRAILHEAD.lat, "lng": TRAILHEAD.lng}
        assert d["status"] == "safe"
        assert d["last_updated"] == {"seconds": 1_700_000_000, "nanoseconds": 0}

    def test_to_dict_includes_profile(self):
        d = _make_tourist().to_dict()
        assert d["age"] == 34
        assert d["tech_comfort"] == "medium"
        assert d["emergency_contact"]["phone"] == "+91 98765 43200"
        assert d["location_history"] == []


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: Tracking Store
# ═══════════════════════════════════════════════════════════════════════════

class TestTrackingStore:

    def test_add_and_get(self):
        store = TrackingStore([_make_tourist()])
        assert "tourist-id-0" in store
        assert store.get("tourist-id-0").name == "Aarav Sharma"
        assert store.get("nope") is None

    def test_duplicate_uid_rejected(self):
        with pytest.raises(ValueError):
            TrackingStore([_make_tourist(), _make_tourist()])

    def test_invalid_history_limit(self):
        with pytest.raises(ValueError):
            TrackingStore(history_limit=0)

    def test_record_position_updates_fix(self):
        store = TrackingStore([_make_tourist()])
        assert store.record_position("tourist-id-0", LatLng(30.1, 78.3), _ts(1))
        t = store.get("tourist-id-0")
        assert t.position == LatLng(30.1, 78.3)
        assert t.last_updated == _ts(1)
        assert t.history[-1].position == LatLng(30.1, 78.3)

    def test_history_capped_at_limit(self):
        store = TrackingStore([_make_tourist()], history_limit=10)
        for i in range(25):
            store.record_position("tourist-id-0", LatLng(30.0 + i * 0.001, 78.0), _ts(i))
        history = store.get("tourist-id-0").history
        assert len(history) == 10
        # Oldest evicted, most-recent-last
        assert history[0].timestamp == _ts(15)
        assert history[-1].timestamp == _ts(24)

    def test_record_unknown_uid(self):
        store = TrackingStore()
        assert not store.record_position("ghost", TRAILHEAD, _ts(0))

    def test_set_status(self):
        store = TrackingStore([_make_tourist()])
        assert store.set_status("tourist-id-0", TouristStatus.WARNING)
        assert store.get("tourist-id-0").status == TouristStatus.WARNING
        assert not store.set_status("ghost", TouristStatus.ALERT)

    def test_snapshot_is_independent(self):
        store = TrackingStore([_make_tourist()])
        snap = store.snapshot("tourist-id-0")
        store.record_position("tourist-id-0", LatLng(31.0, 79.0), _ts(1))
        assert snap.position == TRAILHEAD
        assert store.snapshot("ghost") is None

    def test_not_alerted(self):
        store = TrackingStore([
            _make_tourist("a"), _make_tourist("b", status=TouristStatus.ALERT),
            _make_tourist("c", status=TouristStatus.WARNING),
        ])
        assert store.get("b").is_alerted
        assert not store.get("c").is_alerted
        assert [t.uid for t in store.not_alerted()] == ["a", "c"]

    def test_search_case_insensitive(self):
        store = TrackingStore([
            _make_tourist("tourist-id-0", "Aarav Sharma"),
            _make_tourist("tourist-id-1", "Saanvi Devi"),
        ])
        assert [t.uid for t in store.search("sharma")] == ["tourist-id-0"]
        assert [t.uid for t in store.search("ID-1")] == ["tourist-id-1"]
        assert len(store.search("")) == 2
        assert store.search("nobody") == []

    def test_status_counts(self):
        store = TrackingStore([
            _make_tourist("a"),
            _make_tourist("b", status=TouristStatus.WARNING),
            _make_tourist("c", status=TouristStatus.ALERT),
            _make_tourist("d", status=TouristStatus.ALERT),
        ])
        assert store.status_counts() == {"total": 4, "safe": 1, "warning": 1, "alert": 2}


# ═══════════════════════════════════════════════════════════════════════════
# Section 3: Seed Population
# ═══════════════════════════════════════════════════════════════════════════

class TestSeedTourists:

    def _seed(self, count=20, seed=42):
        return seed_tourists(
            count, np.random.RandomState(seed), center=TRAILHEAD, spread_deg=0.5,
        )

    def test_count_and_ids(self):
        tourists = self._seed()
        assert [t.uid for t in tourists] == [f"tourist-id-{i}" for i in range(20)]
        assert [t.name for t in tourists] == list(NAME_ROSTER)

    def test_all_start_safe_with_history(self):
        for t in self._seed():
            assert t.status == TouristStatus.SAFE
            assert len(t.history) == 1
            assert t.history[0].position == t.position

    def test_profile_ranges(self):
        for i, t in enumerate(self._seed()):
            assert 20 <= t.profile.age < 60
            assert t.profile.medical_notes in ("None", "Allergy: Sulfa Drugs")
            assert t.profile.emergency_contact.phone.endswith(f"{i:02d}")

    def test_start_positions_within_spread(self):
        for t in self._seed():
            assert abs(t.position.lat - TRAILHEAD.lat) <= 0.25
            assert abs(t.position.lng - TRAILHEAD.lng) <= 0.25

    def test_deterministic_with_seed(self):
        a, b = self._seed(seed=7), self._seed(seed=7)
        assert [t.position for t in a] == [t.position for t in b]


# ═══════════════════════════════════════════════════════════════════════════
# Section 4: Random Walk
# ═══════════════════════════════════════════════════════════════════════════

class TestPositionSimulator:

    def test_step_within_jitter(self):
        sim = PositionSimulator(np.random.RandomState(1), jitter_deg=0.001)
        for _ in range(200):
            p = sim.step(TRAILHEAD)
            assert abs(p.lat - TRAILHEAD.lat) <= 0.001
            assert abs(p.lng - TRAILHEAD.lng) <= 0.001

    def test_zero_jitter_stays_put(self):
        sim = PositionSimulator(np.random.RandomState(1), jitter_deg=0.0)
        assert sim.step(TRAILHEAD) == TRAILHEAD

    def test_negative_jitter_rejected(self):
        with pytest.raises(ValueError):
            PositionSimulator(np.random.RandomState(1), jitter_deg=-0.1)

    def test_advance_moves_everyone(self):
        store = TrackingStore([_make_tourist("a"), _make_tourist("b")])
        sim = PositionSimulator(np.random.RandomState(3))
        assert sim.advance(store, _ts(1)) == 2
        for t in store:
            assert len(t.history) == 1
            assert t.last_updated == _ts(1)


# ═══════════════════════════════════════════════════════════════════════════
# Section 5: Status Derivation
# ═══════════════════════════════════════════════════════════════════════════

class TestDeriveStatus:

    def test_inside_high_zone_warns(self):
        status = derive_status(TouristStatus.SAFE, AVALANCHE_POINT, DEFAULT_ZONES, True)
        assert status == TouristStatus.WARNING

    def test_outside_zone_safe(self):
        status = derive_status(TouristStatus.WARNING, TRAILHEAD, DEFAULT_ZONES, True)
        assert status == TouristStatus.SAFE

    def test_predictive_off_forces_safe(self):
        status = derive_status(TouristStatus.WARNING, AVALANCHE_POINT, DEFAULT_ZONES, False)
        assert status == TouristStatus.SAFE

    @pytest.mark.parametrize("predictive", [True, False])
    @pytest.mark.parametrize("position", [AVALANCHE_POINT, TRAILHEAD])
    def test_alert_is_sticky(self, predictive, position):
        status = derive_status(TouristStatus.ALERT, position, DEFAULT_ZONES, predictive)
        assert status == TouristStatus.ALERT


class TestApplyZoneStatus:

    def test_mixed_population(self):
        store = TrackingStore([
            _make_tourist("in", position=AVALANCHE_POINT),
            _make_tourist("out", position=TRAILHEAD),
            _make_tourist("sos", position=TRAILHEAD, status=TouristStatus.ALERT),
        ])
        assert apply_zone_status(store, DEFAULT_ZONES, True) == 1
        assert store.get("in").status == TouristStatus.WARNING
        assert store.get("out").status == TouristStatus.SAFE
        assert store.get("sos").status == TouristStatus.ALERT

    def test_predictive_off(self):
        store = TrackingStore([
            _make_tourist("in", position=AVALANCHE_POINT, status=TouristStatus.WARNING),
        ])
        assert apply_zone_status(store, DEFAULT_ZONES, False) == 0
        assert store.get("in").status == TouristStatus.SAFE
