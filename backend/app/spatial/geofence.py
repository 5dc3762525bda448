"""
geofence.py: Point-in-polygon membership tests against the zone registry.

═══════════════════════════════════════════════════════════════════════════
RAY CASTING
═══════════════════════════════════════════════════════════════════════════

A horizontal ray is cast from the point towards +lng. Every polygon edge
(vᵢ, vⱼ), iterated in order with the closing edge last → first, is
tested; the point is inside iff the ray crosses an odd number of edges.

An edge counts as crossed when:

    (latᵢ > lat) ≠ (latⱼ > lat)                   edge straddles the ray
    lng < lngᵢ + (lngⱼ − lngᵢ)·(lat − latᵢ)/(latⱼ − latᵢ)   crossing is east

Works for convex and non-convex polygons alike. Degenerate horizontal
edges never satisfy the straddle test, so no division by zero occurs.

Boundary convention (fixed, do not "correct"):
    • A vertex whose latitude equals the point's latitude is treated as
      lying BELOW the ray (strict ``>``), i.e. half-open in latitude.
    • A point exactly on a non-horizontal edge is OUTSIDE that edge's
      crossing (strict ``<``), so for a convex zone points on the western
      boundary read as inside and points on the eastern boundary as outside.
The result is identical for any cyclic rotation of the vertex list
because the set of edges does not change.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from backend.app.spatial.zones import GeoZone, LatLng, RiskLevel


def is_point_in_polygon(point: LatLng, polygon: Sequence[LatLng]) -> bool:
    """
    Ray-casting membership test.

    Parameters
    ----------
    point : LatLng
    polygon : sequence of LatLng
        Ordered vertices (≥ 3). Not mutated.

    Returns
    -------
    bool
        True if the point is inside per the boundary convention above.

    Examples
    --------
    >>> square = [LatLng(0, 0), LatLng(0, 1), LatLng(1, 1), LatLng(1, 0)]
    >>> is_point_in_polygon(LatLng(0.5, 0.5), square)
    True
    >>> is_point_in_polygon(LatLng(2.0, 0.5), square)
    False
    """
    lat, lng = point.lat, point.lng
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        yi, xi = polygon[i].lat, polygon[i].lng
        yj, xj = polygon[j].lat, polygon[j].lng
        if (yi > lat) != (yj > lat):
            crossing_lng = (xj - xi) * (lat - yi) / (yj - yi) + xi
            if lng < crossing_lng:
                inside = not inside
        j = i
    return inside


def zones_containing(point: LatLng, zones: Iterable[GeoZone]) -> List[GeoZone]:
    """Return every zone whose polygon contains ``point``."""
    return [z for z in zones if is_point_in_polygon(point, z.bounds)]


def is_in_high_risk_zone(point: LatLng, zones: Iterable[GeoZone]) -> bool:
    """True if ``point`` falls inside any HIGH-risk zone of ``zones``."""
    return any(
        is_point_in_polygon(point, z.bounds)
        for z in zones
        if z.risk == RiskLevel.HIGH
    )
