"""
config.py — pydantic-settings Settings class.

All environment variables for tradewatch are declared here. The pipeline,
sources, and CLI import `settings` from this module; the analysis transforms
never read it directly and receive these values as arguments instead.

Usage:
    from tradewatch_shared.config import settings
    print(settings.comexstat_base_url)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tradewatch_shared import constants


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # ComexStat API
    # -------------------------------------------------------------------------
    comexstat_base_url: str = Field(default="https://api-comexstat.mdic.gov.br")
    request_timeout: float = Field(default=60.0)
    retry_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=20.0)
    retry_max_delay: float = Field(default=60.0)

    # -------------------------------------------------------------------------
    # Analysis windows
    # -------------------------------------------------------------------------
    history_start_year: int = Field(default=constants.HISTORY_START_YEAR)
    series_floor_year: int = Field(default=constants.SERIES_FLOOR_YEAR)
    min_analysis_year: int = Field(default=constants.MIN_ANALYSIS_YEAR)
    surge_threshold: float = Field(default=constants.SURGE_THRESHOLD, gt=0)
    surge_comparison_periods: int = Field(
        default=constants.SURGE_COMPARISON_PERIODS, ge=1
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    @field_validator("comexstat_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
