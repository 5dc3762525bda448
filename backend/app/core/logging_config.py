"""
Logging setup for the dashboard backend.

Production emits one JSON object per line; every other environment gets a
coloured single-line console format. Middleware stores the request id,
client ip and endpoint in a context variable that both formatters read.

Simulation and orchestration code attach domain fields through ``extra``
(tourist_id, alert_id, selection_token, tick); the JSON formatter lifts
them to top-level keys so a single alert can be traced from creation to
its crisis briefing.

Usage:
    from backend.app.core.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Alert created", extra={"alert_id": "alert-...", "tourist_id": "tourist-id-3"})
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from backend.app.core.config import settings

_request_context: ContextVar[Dict[str, Any]] = ContextVar(
    "request_context", default={}
)

# Extra record attributes promoted into JSON output
EXTRA_FIELDS = (
    "tourist_id", "alert_id", "alert_type", "selection_token", "tick",
    "duration_ms", "status_code", "endpoint",
)

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def set_request_context(**kwargs: Any) -> None:
    """Replace the log context of the current request."""
    _request_context.set(kwargs)


def get_request_context() -> Dict[str, Any]:
    return _request_context.get()


# ── JSON ──

class JSONFormatter(logging.Formatter):
    """One JSON object per record, with domain extras as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        ctx = get_request_context()
        if ctx:
            log_entry["context"] = ctx

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(log_entry, default=str)


# ── Console ──

class PrettyFormatter(logging.Formatter):
    """Coloured console line, tagged with tourist, alert and selection ids."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        ts = self.formatTime(record, "%H:%M:%S")
        msg = record.getMessage()

        ctx = get_request_context()
        ctx_str = ""
        if ctx.get("request_id"):
            ctx_str = f" [{ctx['request_id'][:8]}]"

        tags = "".join(
            f" {key}={getattr(record, key)}"
            for key in ("tourist_id", "alert_id", "selection_token")
            if hasattr(record, key)
        )

        formatted = (
            f"{color}{ts} {record.levelname:8s}{self.RESET}"
            f"{ctx_str} {record.name}: {msg}{tags}"
        )

        if record.exc_info and record.exc_info[1]:
            formatted += f"\n  {type(record.exc_info[1]).__name__}: {record.exc_info[1]}"

        return formatted


# ── Setup ──

def setup_logging() -> None:
    """Install the formatter for the configured environment on the root logger."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if settings.is_production else PrettyFormatter())
    root.handlers.clear()
    root.addHandler(handler)

    # Dashboards poll every tick; keep access logs and client chatter quiet
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
