"""
Dashboard error types and the handlers that turn them into JSON responses.

Every error body has the shape ``{"error": {"code", "message", "status",
"details"}}``; outside production the request path and method are added.

Only the HTTP boundary turns these into responses. The crisis response
orchestrator catches GenerationServiceError itself and converts it into
an error artifact, so a failed generation never reaches these handlers.

Usage:
    from backend.app.core.errors import NotFoundError, register_error_handlers

    raise NotFoundError("Tourist", uid="tourist-id-3")
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.core.config import settings

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Exception Hierarchy
# ═══════════════════════════════════════════════════════════════════════════

class TourSafeError(Exception):
    """Root of the dashboard errors; carries an HTTP status and error code."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class NotFoundError(TourSafeError):
    """Unknown tourist or alert id (404)."""

    def __init__(self, resource: str, **identifiers: Any):
        details = {"resource": resource, **identifiers}
        super().__init__(
            message=f"{resource} not found",
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class ValidationError(TourSafeError):
    """A query or body value the dashboard cannot act on (422)."""

    def __init__(self, message: str, *, field: Optional[str] = None, **details: Any):
        d = {**details}
        if field:
            d["field"] = field
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=d,
        )


class ExternalServiceError(TourSafeError):
    """An upstream service call failed (502)."""

    def __init__(self, service: str, message: str = "", **details: Any):
        super().__init__(
            message=f"External service '{service}' failed: {message}",
            status_code=502,
            error_code="EXTERNAL_SERVICE_ERROR",
            details={"service": service, **details},
        )


class GenerationServiceError(ExternalServiceError):
    """The crisis response generation service failed or replied unusably."""

    def __init__(self, message: str = "", **details: Any):
        super().__init__("generation", message, **details)
        self.error_code = "GENERATION_ERROR"


# ═══════════════════════════════════════════════════════════════════════════
# Response Body
# ═══════════════════════════════════════════════════════════════════════════

def _build_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "error": {
            "code": error_code,
            "message": message,
            "status": status_code,
        }
    }

    if details:
        body["error"]["details"] = details

    if request and not settings.is_production:
        body["error"]["path"] = str(request.url.path)
        body["error"]["method"] = request.method

    return JSONResponse(status_code=status_code, content=body)


# ═══════════════════════════════════════════════════════════════════════════
# Handlers
# ═══════════════════════════════════════════════════════════════════════════

def register_error_handlers(app: FastAPI) -> None:
    """Attach the dashboard error handlers to ``app``."""

    @app.exception_handler(TourSafeError)
    async def handle_toursafe_error(request: Request, exc: TourSafeError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "%s %s -> %s: %s | details=%s",
            request.method, request.url.path,
            exc.error_code, exc.message, exc.details,
        )
        return _build_error_response(
            exc.status_code, exc.error_code, exc.message,
            exc.details, request,
        )

    @app.exception_handler(ValueError)
    async def handle_value_error(request: Request, exc: ValueError):
        logger.warning("%s %s -> invalid value: %s", request.method, request.url.path, exc)
        return _build_error_response(
            422, "VALIDATION_ERROR", str(exc), request=request,
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.critical(
            "%s %s -> unhandled %s: %s\n%s",
            request.method, request.url.path,
            type(exc).__name__, exc, traceback.format_exc(),
        )
        message = str(exc) if settings.DEBUG else "Internal server error"
        return _build_error_response(500, "INTERNAL_ERROR", message, request=request)
