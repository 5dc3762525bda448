"""
tracking: Tourist records, the tracking store and the simulated position feed.

Sub-modules:
    models     - Tourist, TouristStatus, Timestamp and profile types
    store      - TrackingStore, bounded-history owner of all tourists
    simulator  - random-walk feed, seed population, geofence status pass
"""
