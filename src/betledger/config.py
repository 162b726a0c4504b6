"""Environment-driven configuration helpers for BetLedger."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./betledger.db")
    export_path: Path = Field(default=Path("betledger_export.xlsx"))

    default_lay_commission_pct: float = Field(default=4.5, ge=0.0, le=100.0)
    lay_divisor_epsilon: float = Field(default=1e-9, gt=0.0)
    odds_change_threshold: float = Field(default=0.05, ge=0.0, le=1.0)

    betledger_api_key: str = Field(default="", validation_alias="BETLEDGER_API_KEY")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_api_access_key() -> str:
    key = os.getenv("BETLEDGER_API_KEY") or get_settings().betledger_api_key
    if not key:
        raise RuntimeError(
            "BETLEDGER_API_KEY is not configured. Set it in your environment or .env file."
        )
    return key
