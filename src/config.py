"""
Horizon — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/horizon.db"

    # Local timezone used by the system clock (week boundaries, late-night checks)
    TIMEZONE: str = "UTC"

    # How far ahead "Coming up" looks for important dates
    UPCOMING_DATES_HORIZON_DAYS: int = 60

    # Trailing window for shared-activity counts in relationship health
    RELATIONSHIP_WINDOW_DAYS: int = 30

    LOG_LEVEL: str = "INFO"

    @field_validator("TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v!r}") from exc
        return v

    @field_validator("UPCOMING_DATES_HORIZON_DAYS", "RELATIONSHIP_WINDOW_DAYS", mode="before")
    @classmethod
    def parse_days(cls, v: str | int) -> int:
        days = int(v)
        if days < 0:
            raise ValueError(f"Day count must be non-negative, got {days}")
        return days

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = v.strip().upper() or "INFO"
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v!r} (expected one of {', '.join(_LOG_LEVELS)})")
        return level


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/horizon.db"),
            TIMEZONE=os.getenv("TIMEZONE", "UTC"),
            UPCOMING_DATES_HORIZON_DAYS=os.getenv("UPCOMING_DATES_HORIZON_DAYS", "60"),
            RELATIONSHIP_WINDOW_DAYS=os.getenv("RELATIONSHIP_WINDOW_DAYS", "30"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid configuration in .env\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
