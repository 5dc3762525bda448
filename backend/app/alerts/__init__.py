"""
alerts: Alert records, the bounded alert log and the alert generator.

Sub-modules:
    models     - Alert, AlertType, time-derived alert ids
    alert_log  - AlertLog, newest-first with fixed capacity
    generator  - AlertGenerator, per-tick probabilistic alert raising
"""
