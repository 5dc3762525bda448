"""
FastAPI application entry point.

Run with:
    uvicorn backend.app.main:app --reload --port 8000

Or from the project root:
    python -m uvicorn backend.app.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ── Core infrastructure ──
from backend.app.core.config import Settings, settings
from backend.app.core.logging_config import setup_logging, get_logger
from backend.app.core.errors import register_error_handlers
from backend.app.core.middleware import RequestLoggingMiddleware
from backend.app.core.health import HealthStatus, run_health_check

# ── Domain ──
from backend.app.crisis.gemini_client import GeminiClient
from backend.app.crisis.orchestrator import CrisisGenerator, CrisisResponseOrchestrator
from backend.app.simulation.runner import SimulationRunner
from backend.app.simulation.state import SimulationState

# ── API routers ──
from backend.app.api.v1.tracking import router as tracking_router
from backend.app.api.v1.alerts import router as alert_router
from backend.app.api.v1.crisis import router as crisis_router

# ── Initialise logging ──
setup_logging()
logger = get_logger(__name__)


def create_app(
    app_settings: Settings = settings,
    *,
    simulation: Optional[SimulationState] = None,
    generate: Optional[CrisisGenerator] = None,
    start_runner: bool = True,
) -> FastAPI:
    """
    Build the dashboard backend.

    Parameters
    ----------
    app_settings : Settings
        Configuration; defaults to the environment-derived settings.
    simulation : SimulationState, optional
        Pre-built state (tests). Seeded from settings when omitted.
    generate : CrisisGenerator, optional
        Replacement for the Gemini client's ``generate`` (tests).
    start_runner : bool
        Whether the lifespan starts the periodic tick loop.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting %s v%s [%s]",
            app_settings.APP_NAME, app_settings.APP_VERSION, app_settings.ENVIRONMENT,
        )
        state = simulation or SimulationState.from_settings(app_settings)
        client = GeminiClient.from_settings(app_settings)
        if generate is None and not client.is_configured:
            logger.warning("GEMINI_API_KEY not set; crisis responses will fail")

        orchestrator = CrisisResponseOrchestrator(
            state,
            generate or client.generate,
            rescue_language=app_settings.RESCUE_LANGUAGE,
            rescue_authority=app_settings.RESCUE_AUTHORITY,
            map_zoom=app_settings.MAP_FOCUS_ZOOM,
        )
        runner = SimulationRunner(state)

        app.state.simulation = state
        app.state.orchestrator = orchestrator
        app.state.runner = runner
        app.state.gemini_client = client

        if start_runner:
            await runner.start()
        logger.info("Tracking %d tourists", len(state.store))

        yield

        await runner.stop()
        await orchestrator.aclose()
        await client.close()
        logger.info("Shutting down %s", app_settings.APP_NAME)

    app = FastAPI(
        title=app_settings.APP_NAME,
        description=(
            "Authority dashboard backend for tourist safety monitoring. "
            "Simulates live tourist positions, classifies them against "
            "high-risk geo-zones, raises emergency alerts, and produces an "
            "AI-generated crisis response briefing for the selected alert."
        ),
        version=app_settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── Middleware stack (outermost first) ──
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS if not app_settings.CORS_ALLOW_ALL else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)

    app.include_router(tracking_router)
    app.include_router(alert_router)
    app.include_router(crisis_router)

    # ── Root & health endpoints ──

    @app.get("/", tags=["root"])
    async def root():
        return {
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "environment": app_settings.ENVIRONMENT,
            "modules": [
                "tourist-tracking",
                "geofence-classification",
                "alert-log",
                "crisis-response",
            ],
            "docs": "/docs",
        }

    async def _health(request: Request):
        return await run_health_check(
            request.app.state.simulation,
            request.app.state.runner,
            request.app.state.gemini_client,
            app_settings=app_settings,
        )

    @app.get("/health", tags=["health"])
    async def health_check(request: Request):
        """Runner, tracking store and generation service health."""
        report = await _health(request)
        return report.to_dict()

    @app.get("/health/live", tags=["health"])
    async def liveness():
        """Liveness: the process answers."""
        return {"status": "alive"}

    @app.get("/health/ready", tags=["health"])
    async def readiness(request: Request):
        """Readiness: 503 while any component is unhealthy."""
        report = await _health(request)
        if report.status == HealthStatus.UNHEALTHY:
            return JSONResponse(status_code=503, content=report.to_dict())
        return report.to_dict()

    return app


app = create_app()
