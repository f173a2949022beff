"""Environment-driven configuration helpers for TennisLab."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./tennislab.db")

    min_bet: float = Field(default=10.0, gt=0)
    max_bet: float = Field(default=1000.0, gt=0)

    bonus_step: float = Field(default=0.2, gt=0.0, le=1.0)
    max_tiebreak_bonus: float = Field(default=0.4, ge=0.0)

    parlay_bonus_threshold: int = Field(default=3, ge=2)
    parlay_bonus_percentage: float = Field(default=0.05, ge=0.0, le=1.0)
    streak_booster_threshold: int = Field(default=3, ge=1)
    streak_booster_percentage: float = Field(default=0.02, ge=0.0, le=1.0)
    max_streak_booster: float = Field(default=0.20, ge=0.0, le=1.0)
    safe_bet_cost: int = Field(default=50, ge=0)

    session_namespace: str = Field(default="tennislab_form_predictions")
    reconcile_on_result_change: bool = Field(default=False)

    bet_service_url: str = Field(default="http://localhost:54321")
    bet_service_token: str = Field(default="", validation_alias="BET_SERVICE_TOKEN")
    bet_service_timeout: float = Field(default=15.0, gt=0)

    tennislab_api_key: str = Field(default="", validation_alias="TENNISLAB_API_KEY")

    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    public_api_base_url: str = Field(default="", validation_alias="PUBLIC_API_BASE_URL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_api_access_key() -> str:
    key = os.getenv("TENNISLAB_API_KEY") or get_settings().tennislab_api_key
    if not key:
        raise RuntimeError(
            "TENNISLAB_API_KEY is not configured. Set it in your environment or .env file."
        )
    return key
