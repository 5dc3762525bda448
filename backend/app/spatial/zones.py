"""
zones.py: Registry of named risk polygons for the monitored region.

Zones are loaded once and never mutated. The tracking simulation only
consults HIGH-risk zones when deriving tourist status; MEDIUM zones are
exposed to the map collaborator for display.

Default registry (Uttarakhand Himalaya):

    ID       Name                                Risk     Vertices
    ──────   ─────────────────────────────────   ──────   ────────
    zone-1   High-Altitude Avalanche Zone        high     4
    zone-2   Restricted Nanda Devi Sanctuary     medium   4
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


class RiskLevel(str, Enum):
    """Risk classification of a geo-zone."""
    HIGH   = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class LatLng:
    """A geographic point in decimal degrees."""
    lat: float
    lng: float

    def rounded(self, places: int = 4) -> Tuple[float, float]:
        return round(self.lat, places), round(self.lng, places)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class GeoZone:
    """
    A named polygon with an assigned risk level.

    Attributes
    ----------
    zone_id : str
        Stable identifier, also used by the map layer to key polygons.
    name : str
        Display name.
    risk : RiskLevel
    bounds : tuple of LatLng
        Ordered vertices; the closing edge (last → first) is implicit.
    """
    zone_id: str
    name: str
    risk: RiskLevel
    bounds: Tuple[LatLng, ...]

    def __post_init__(self) -> None:
        if len(self.bounds) < 3:
            raise ValueError(
                f"Zone {self.zone_id} needs at least 3 vertices, got {len(self.bounds)}"
            )

    @classmethod
    def from_points(
        cls,
        zone_id: str,
        name: str,
        risk: RiskLevel,
        points: Sequence[Tuple[float, float]],
    ) -> "GeoZone":
        return cls(zone_id, name, risk, tuple(LatLng(lat, lng) for lat, lng in points))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.zone_id,
            "name": self.name,
            "risk": self.risk.value,
            "bounds": [p.to_dict() for p in self.bounds],
        }


DEFAULT_ZONES: Tuple[GeoZone, ...] = (
    GeoZone.from_points(
        "zone-1", "High-Altitude Avalanche Zone", RiskLevel.HIGH,
        [(31.05, 78.85), (31.10, 78.88), (31.07, 78.95), (31.02, 78.92)],
    ),
    GeoZone.from_points(
        "zone-2", "Restricted Nanda Devi Sanctuary", RiskLevel.MEDIUM,
        [(30.40, 79.80), (30.45, 79.82), (30.43, 79.88), (30.38, 79.85)],
    ),
)


class ZoneRegistry:
    """Immutable, ordered collection of geo-zones."""

    def __init__(self, zones: Sequence[GeoZone] = DEFAULT_ZONES):
        ids = [z.zone_id for z in zones]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate zone ids in registry: {ids}")
        self._zones: Tuple[GeoZone, ...] = tuple(zones)

    def __iter__(self) -> Iterator[GeoZone]:
        return iter(self._zones)

    def __len__(self) -> int:
        return len(self._zones)

    def get(self, zone_id: str) -> Optional[GeoZone]:
        for zone in self._zones:
            if zone.zone_id == zone_id:
                return zone
        return None

    def by_risk(self, risk: RiskLevel) -> List[GeoZone]:
        return [z for z in self._zones if z.risk == risk]

    def high_risk(self) -> List[GeoZone]:
        return self.by_risk(RiskLevel.HIGH)
