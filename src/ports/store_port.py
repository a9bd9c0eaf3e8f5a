"""Store port — abstract interface for reading a user's records.

Core modules depend on this protocol, never on a specific backend.
Every read is scoped to one owning user.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.data.models import ActivityLog, Goal, ImportantDate, Person


class StoreError(Exception):
    """Raised when any store operation fails."""


class StorePort(Protocol):
    """Abstract record store used by the service layer."""

    def list_goals(
        self, user_id: str, category: str | None = None,
    ) -> list[Goal]: ...

    def list_people(
        self, user_id: str, relationship: str | None = None,
    ) -> list[Person]: ...

    def list_important_dates(self, user_id: str) -> list[ImportantDate]: ...

    def list_activity_logs(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        kind: str | None = None,
    ) -> list[ActivityLog]: ...
