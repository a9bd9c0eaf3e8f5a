"""Shared test fixtures and configuration.

Sets up environment variables before any src import so settings load
predictably, and provides common fixtures like a temp DB and a frozen clock.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("UPCOMING_DATES_HORIZON_DAYS", "60")
os.environ.setdefault("RELATIONSHIP_WINDOW_DAYS", "30")

import pytest
from datetime import datetime, timezone

# Wednesday; its Monday-start week runs 2025-03-24 .. 2025-03-30
NOW = datetime(2025, 3, 26, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """The fixed reference instant used across tests."""
    return NOW


@pytest.fixture
def fixed_clock(now):
    from src.adapters.clock import FixedClock
    return FixedClock(now)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_horizon.db")


@pytest.fixture
def horizon_db(tmp_db_path):
    """Return a HorizonDB instance backed by a temp file."""
    from src.data.db import HorizonDB
    return HorizonDB(db_path=tmp_db_path, tz_name="UTC")
