"""
simulation: State container, ordered tick pipeline and the tick timer.

Sub-modules:
    state   - SimulationState, TickReport, TICK_PIPELINE
    runner  - SimulationRunner, asyncio loop with start()/stop()
"""
