"""
orchestrator.py: Crisis response state machine for the selected alert.

═══════════════════════════════════════════════════════════════════════════
STATES
═══════════════════════════════════════════════════════════════════════════

                 select(alert)                reply parsed
    ┌──────┐  ───────────────►  ┌─────────┐  ─────────────►  ┌──────────┐
    │ IDLE │                    │ PENDING │                  │ RESOLVED │
    └──────┘  ◄───────────────  └─────────┘  ─────────────►  └──────────┘
                  clear()                     any failure      ┌────────┐
                                                         ────► │ FAILED │
                                                               └────────┘

    • select() looks up the alert and its tourist under the simulation
      lock. If either is missing nothing changes and no request is made.
    • Entering PENDING clears the current artifact immediately.
    • RESOLVED holds the four-section briefing; FAILED holds only an
      error string. No other artifact shape exists.

═══════════════════════════════════════════════════════════════════════════
FENCING
═══════════════════════════════════════════════════════════════════════════

Every select()/clear() increments a token. A generation task carries the
token it was started with and applies its outcome only if that token is
still current; otherwise the outcome is logged and dropped. Superseded
requests are never cancelled, they simply lose the race.

Failures are classified for logs (``last_failure``) but the artifact
always carries the same operator-facing message.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from backend.app.core.errors import GenerationServiceError
from backend.app.crisis.prompt import GenerationRequest, build_generation_request
from backend.app.crisis.schema import CrisisBriefing, MalformedBriefingError, parse_briefing
from backend.app.simulation.state import SimulationState

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate AI response. API error or overload."

CrisisGenerator = Callable[[GenerationRequest], Awaitable[str]]


class CrisisState(str, Enum):
    IDLE     = "idle"
    PENDING  = "pending"
    RESOLVED = "resolved"
    FAILED   = "failed"


class FailureKind(str, Enum):
    SERVICE    = "service"     # transport / HTTP / envelope
    MALFORMED  = "malformed"   # not JSON or schema violation
    UNEXPECTED = "unexpected"  # anything else raised by the generator


@dataclass(frozen=True)
class CrisisResponse:
    """Artifact for one selection: a briefing or an error, never both."""
    alert_id: str
    token: int
    briefing: Optional[CrisisBriefing] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.briefing is None) == (self.error is None):
            raise ValueError("CrisisResponse needs exactly one of briefing or error")

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return self.briefing.model_dump()


@dataclass(frozen=True)
class MapFocus:
    """Recentre hint for the map collaborator."""
    lat: float
    lng: float
    zoom: int

    def to_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng, "zoom": self.zoom}


class CrisisResponseOrchestrator:
    """
    Owns the single current crisis artifact.

    Must be driven from the event loop thread: select() schedules the
    generation with asyncio.create_task.

    Usage:
        orchestrator = CrisisResponseOrchestrator(state, client.generate)
        task = orchestrator.select("alert-1718000000000-1")
        if task:
            await task
        orchestrator.snapshot()
    """

    def __init__(
        self,
        state: SimulationState,
        generate: CrisisGenerator,
        *,
        rescue_language: str = "Hindi",
        rescue_authority: str = "NDRF / SDRF Uttarakhand",
        map_zoom: int = 13,
    ):
        self.simulation = state
        self._generate = generate
        self.rescue_language = rescue_language
        self.rescue_authority = rescue_authority
        self.map_zoom = map_zoom

        self._token = 0
        self._state = CrisisState.IDLE
        self._selected_alert_id: Optional[str] = None
        self._response: Optional[CrisisResponse] = None
        self._map_focus: Optional[MapFocus] = None
        self._tasks: Set[asyncio.Task] = set()
        self.last_failure: Optional[FailureKind] = None
        self.stale_discarded = 0

    # ── Read side ──

    @property
    def state(self) -> CrisisState:
        return self._state

    @property
    def token(self) -> int:
        return self._token

    @property
    def selected_alert_id(self) -> Optional[str]:
        return self._selected_alert_id

    @property
    def response(self) -> Optional[CrisisResponse]:
        return self._response

    @property
    def map_focus(self) -> Optional[MapFocus]:
        return self._map_focus

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "token": self._token,
            "selected_alert_id": self._selected_alert_id,
            "response": self._response.to_dict() if self._response else None,
            "map_focus": self._map_focus.to_dict() if self._map_focus else None,
        }

    # ── Transitions ──

    def select(self, alert_id: Optional[str]) -> Optional[asyncio.Task]:
        """
        Handle a change of the selected alert.

        Returns the generation task, or None when no request was issued
        (deselect, unchanged selection, or lookup failure).
        """
        if alert_id is None:
            self.clear()
            return None

        if alert_id == self._selected_alert_id and self._state in (
            CrisisState.PENDING, CrisisState.RESOLVED,
        ):
            return None

        with self.simulation.lock:
            alert = self.simulation.alert_log.get(alert_id)
            tourist = self.simulation.store.snapshot(alert.uid) if alert else None

        if alert is None or tourist is None:
            logger.debug(
                "Selection ignored: %s not found",
                "alert" if alert is None else "tourist",
                extra={"alert_id": alert_id},
            )
            return None

        self._token += 1
        token = self._token
        self._selected_alert_id = alert_id
        self._state = CrisisState.PENDING
        self._response = None
        self._map_focus = MapFocus(tourist.position.lat, tourist.position.lng, self.map_zoom)

        request = build_generation_request(
            tourist, alert,
            rescue_language=self.rescue_language,
            rescue_authority=self.rescue_authority,
        )
        logger.info(
            "Crisis response pending", extra={
                "alert_id": alert_id, "tourist_id": tourist.uid, "selection_token": token,
            },
        )

        task = asyncio.create_task(self._run(token, alert_id, request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def clear(self) -> None:
        """Deselect; any in-flight result becomes stale."""
        self._token += 1
        self._selected_alert_id = None
        self._state = CrisisState.IDLE
        self._response = None
        self._map_focus = None

    async def _run(self, token: int, alert_id: str, request: GenerationRequest) -> None:
        start = time.perf_counter()
        log_extra = {"alert_id": alert_id, "selection_token": token}
        try:
            text = await self._generate(request)
            briefing = parse_briefing(text)
        except GenerationServiceError as e:
            logger.error("Generation service failed: %s", e.message, extra=log_extra)
            self._fail(token, alert_id, FailureKind.SERVICE)
        except MalformedBriefingError as e:
            logger.warning("Malformed briefing: %s", e, extra=log_extra)
            self._fail(token, alert_id, FailureKind.MALFORMED)
        except Exception:
            logger.exception("Unexpected generation error", extra=log_extra)
            self._fail(token, alert_id, FailureKind.UNEXPECTED)
        else:
            self._apply(
                token, CrisisResponse(alert_id, token, briefing=briefing), CrisisState.RESOLVED,
            )
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.debug("Generation finished in %.0fms", duration_ms, extra=log_extra)

    def _fail(self, token: int, alert_id: str, kind: FailureKind) -> None:
        response = CrisisResponse(alert_id, token, error=GENERATION_FAILED_MESSAGE)
        if self._apply(token, response, CrisisState.FAILED):
            self.last_failure = kind

    def _apply(self, token: int, response: CrisisResponse, state: CrisisState) -> bool:
        if token != self._token:
            self.stale_discarded += 1
            logger.info(
                "Discarding stale %s result (current token %d)", state.value, self._token,
                extra={"alert_id": response.alert_id, "selection_token": token},
            )
            return False
        self._response = response
        self._state = state
        logger.info(
            "Crisis response %s", state.value,
            extra={"alert_id": response.alert_id, "selection_token": token},
        )
        return True

    async def aclose(self) -> None:
        """Cancel in-flight generations (shutdown only)."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
