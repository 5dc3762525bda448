"""
runner.py: Recurring timer that drives SimulationState.tick().

One asyncio task ticks every TICK_INTERVAL_SECONDS. Ticks are short and
synchronous, so crisis generation requests (awaiting the network on the
same loop) interleave between ticks without ever blocking them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from backend.app.simulation.state import SimulationState

logger = logging.getLogger(__name__)


class SimulationRunner:
    """
    Start/stop lifecycle around the tick loop.

    Usage:
        runner = SimulationRunner(state)  # state.tick_interval_seconds
        await runner.start()
        ...
        await runner.stop()
    """

    def __init__(self, state: SimulationState, interval_seconds: Optional[float] = None):
        if interval_seconds is None:
            interval_seconds = state.tick_interval_seconds
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        self.state = state
        self.interval_seconds = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info("Simulation runner started (every %.1fs)", self.interval_seconds)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Simulation runner stopped after %d ticks", self.state.tick_count)

    async def _run(self) -> None:
        """Tick, then sleep; the first tick happens one interval after start."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.state.tick()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception("Simulation tick failed: %s", e)
