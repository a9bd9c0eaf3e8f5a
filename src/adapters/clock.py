"""Clock adapters — system time in the configured timezone, or a frozen instant."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


class SystemClock:
    """Wall-clock time in an IANA timezone (defaults to settings.TIMEZONE)."""

    def __init__(self, tz_name: str | None = None) -> None:
        if tz_name is None:
            from src.config import settings
            tz_name = settings.TIMEZONE
        self._tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """Always returns the same instant. Used by tests and replays."""

    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant
