"""
spatial: Geo-zone registry and geofence membership tests.

Sub-modules:
    zones     - GeoZone / LatLng types and the default zone registry
    geofence  - ray-casting point-in-polygon evaluator
"""
