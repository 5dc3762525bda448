"""
Environment configuration: single source of truth for all settings.

Uses pydantic-settings for type-safe config with .env file support.
All values have sensible defaults for local development; the simulation
defaults reproduce the reference dashboard cadence (3 s tick, ±0.001°
jitter, 10 % alert chance per tick).

Usage:
    from backend.app.core.config import settings
    print(settings.TICK_INTERVAL_SECONDS)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables or .env file.

    Precedence: env var > .env file > default value
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──
    APP_NAME: str = "TourSafe Authority Dashboard"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING | ERROR | CRITICAL

    # ── Server ──
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ── CORS ──
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    CORS_ALLOW_ALL: bool = True  # False in production

    # ── Simulation ──
    TICK_INTERVAL_SECONDS: float = 3.0
    POSITION_JITTER_DEG: float = 0.001  # max per-axis step, each direction
    ALERT_PROBABILITY: float = 0.1  # chance of one new alert per tick
    HISTORY_LIMIT: int = 10
    ALERT_LOG_LIMIT: int = 50
    PREDICTIVE_WARNINGS: bool = True
    TOURIST_COUNT: int = 20
    SIMULATION_SEED: Optional[int] = None  # None → nondeterministic
    REGION_CENTER_LAT: float = 30.0869
    REGION_CENTER_LNG: float = 78.2676
    REGION_SPREAD_DEG: float = 0.5

    # ── Crisis response generation ──
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GENERATION_TIMEOUT_SECONDS: float = 60.0
    RESCUE_LANGUAGE: str = "Hindi"
    RESCUE_AUTHORITY: str = "NDRF / SDRF Uttarakhand"

    # ── Map collaborator ──
    MAP_FOCUS_ZOOM: int = 13

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
