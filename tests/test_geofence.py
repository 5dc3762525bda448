"""
test_geofence.py: Tests for geo-zone polygons and point-in-polygon checks.

Covers:
    • LatLng / GeoZone construction and serialisation
    • ZoneRegistry lookups and the default Uttarakhand zones
    • Ray-casting membership (convex, non-convex, rotation, boundaries)
    • High-risk filtering

Run with:
    pytest tests/test_geofence.py -v
"""

from __future__ import annotations

import pytest

from backend.app.spatial.geofence import (
    is_in_high_risk_zone,
    is_point_in_polygon,
    zones_containing,
)
from backend.app.spatial.zones import (
    DEFAULT_ZONES,
    GeoZone,
    LatLng,
    RiskLevel,
    ZoneRegistry,
)


# ═══════════════════════════════════════════════════════════════════════════
# Test Fixtures
# ═══════════════════════════════════════════════════════════════════════════

UNIT_SQUARE = [LatLng(0, 0), LatLng(0, 1), LatLng(1, 1), LatLng(1, 0)]

# "U" shape open to the north: notch between lng 1 and 2 above lat 1
U_SHAPE = [
    LatLng(0, 0), LatLng(0, 3), LatLng(3, 3), LatLng(3, 2),
    LatLng(1, 2), LatLng(1, 1), LatLng(3, 1), LatLng(3, 0),
]

# Inside zone-1 with ~0.04° margin on every side
AVALANCHE_POINT = LatLng(31.07, 78.90)


def _make_zone(
    zone_id: str = "z",
    risk: RiskLevel = RiskLevel.HIGH,
    points=((0, 0), (0, 1), (1, 1), (1, 0)),
) -> GeoZone:
    return GeoZone.from_points(zone_id, f"Zone {zone_id}", risk, points)


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: Zone Models
# ═══════════════════════════════════════════════════════════════════════════

class TestLatLng:

    def test_rounded(self):
        assert LatLng(31.123456, 78.987654).rounded(4) == (31.1235, 78.9877)

    def test_to_dict(self):
        assert LatLng(1.5, 2.5).to_dict() == {"lat": 1.5, "lng": 2.5}

    def test_frozen(self):
        p = LatLng(1.0, 2.0)
        with pytest.raises(AttributeError):
            p.lat = 3.0  # type: ignore[misc]


class TestGeoZone:

    def test_needs_three_vertices(self):
        with pytest.raises(ValueError):
            _make_zone(points=((0, 0), (1, 1)))

    def test_to_dict_shape(self):
        d = _make_zone("zone-x", RiskLevel.MEDIUM).to_dict()
        assert d["id"] == "zone-x"
        assert d["risk"] == "medium"
        assert len(d["bounds"]) == 4
        assert d["bounds"][0] == {"lat": 0, "lng": 0}


class TestZoneRegistry:

    def test_default_zones(self):
        registry = ZoneRegistry()
        assert len(registry) == 2
        assert registry.get("zone-1").name == "High-Altitude Avalanche Zone"
        assert registry.get("zone-2").risk == RiskLevel.MEDIUM

    def test_high_risk_only_zone_1(self):
        assert [z.zone_id for z in ZoneRegistry().high_risk()] == ["zone-1"]

    def test_unknown_zone(self):
        assert ZoneRegistry().get("zone-99") is None

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            ZoneRegistry([_make_zone("a"), _make_zone("a")])

    def test_iteration_order(self):
        ids = [z.zone_id for z in ZoneRegistry(DEFAULT_ZONES)]
        assert ids == ["zone-1", "zone-2"]


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: Point in Polygon
# ═══════════════════════════════════════════════════════════════════════════

class TestPointInPolygon:

    def test_centre_inside(self):
        assert is_point_in_polygon(LatLng(0.5, 0.5), UNIT_SQUARE)

    @pytest.mark.parametrize("point", [
        LatLng(2.0, 0.5), LatLng(-0.5, 0.5), LatLng(0.5, 1.5), LatLng(0.5, -0.5),
    ])
    def test_outside(self, point):
        assert not is_point_in_polygon(point, UNIT_SQUARE)

    def test_non_convex_notch_is_outside(self):
        assert not is_point_in_polygon(LatLng(2.0, 1.5), U_SHAPE)

    def test_non_convex_arms_inside(self):
        assert is_point_in_polygon(LatLng(2.0, 0.5), U_SHAPE)
        assert is_point_in_polygon(LatLng(2.0, 2.5), U_SHAPE)
        assert is_point_in_polygon(LatLng(0.5, 1.5), U_SHAPE)

    def test_rotation_invariant(self):
        points = [LatLng(0.5, 0.5), LatLng(0.99, 0.01), LatLng(1.5, 0.5), LatLng(0.0, 0.5)]
        for k in range(len(UNIT_SQUARE)):
            rotated = UNIT_SQUARE[k:] + UNIT_SQUARE[:k]
            for p in points:
                assert is_point_in_polygon(p, rotated) == is_point_in_polygon(p, UNIT_SQUARE)

    def test_reversed_winding_same_result(self):
        reversed_square = list(reversed(UNIT_SQUARE))
        assert is_point_in_polygon(LatLng(0.5, 0.5), reversed_square)
        assert not is_point_in_polygon(LatLng(1.5, 0.5), reversed_square)

    def test_western_edge_inside_eastern_edge_outside(self):
        assert is_point_in_polygon(LatLng(0.5, 0.0), UNIT_SQUARE)
        assert not is_point_in_polygon(LatLng(0.5, 1.0), UNIT_SQUARE)

    def test_polygon_not_mutated(self):
        polygon = list(UNIT_SQUARE)
        is_point_in_polygon(LatLng(0.5, 0.5), polygon)
        assert polygon == UNIT_SQUARE

    def test_avalanche_zone_scenario(self):
        zone_1 = ZoneRegistry().get("zone-1")
        assert is_point_in_polygon(AVALANCHE_POINT, zone_1.bounds)

    def test_region_centre_outside_all_zones(self):
        assert zones_containing(LatLng(30.0869, 78.2676), DEFAULT_ZONES) == []


class TestHighRiskZone:

    def test_inside_high(self):
        assert is_in_high_risk_zone(AVALANCHE_POINT, DEFAULT_ZONES)

    def test_medium_zone_does_not_count(self):
        sanctuary = LatLng(30.42, 79.84)
        assert [z.zone_id for z in zones_containing(sanctuary, DEFAULT_ZONES)] == ["zone-2"]
        assert not is_in_high_risk_zone(sanctuary, DEFAULT_ZONES)

    def test_empty_zone_list(self):
        assert not is_in_high_risk_zone(AVALANCHE_POINT, [])
