"""
Horizon — UI-Agnostic Insight Service.

Stateless service layer: reads one user's records through the store port,
resolves the time windows from the injected clock, and hands fully
materialized inputs to the pure computation modules. Every method returns
plain frozen dataclasses that any UI can render.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, TypeVar

from src.core.awareness import RelationshipHealth, evaluate_relationships
from src.core.balance_scorer import BalanceReport, build_balance_buckets, score
from src.core.date_math import trailing_window, week_bounds
from src.core.drift_detector import ACTIVITY_BASELINE_WEEKS, DriftMetric, detect_drift
from src.core.nudges import LOOKBACK_DAYS, Nudge, detect_nudges
from src.core.upcoming_dates import UpcomingDate, upcoming_dates
from src.core.weekly_tracker import GoalProgress, WeekOverWeek, goal_progress, week_over_week
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.data.models import ActivityLog
    from src.ports.clock_port import ClockPort
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Dashboard:
    """Everything the home screen shows, computed against one instant."""

    user_id: str
    generated_at: datetime
    goals: tuple[GoalProgress, ...]
    relationships: tuple[RelationshipHealth, ...]
    upcoming: tuple[UpcomingDate, ...]
    balance: BalanceReport
    nudges: tuple[Nudge, ...]
    drift: tuple[DriftMetric, ...]


class InsightService:
    """Derived views over a user's goals, people, dates and activity logs."""

    def __init__(
        self,
        store: StorePort,
        clock: ClockPort,
        relationship_window_days: int | None = None,
        upcoming_horizon_days: int | None = None,
    ) -> None:
        if relationship_window_days is None or upcoming_horizon_days is None:
            from src.config import settings
            if relationship_window_days is None:
                relationship_window_days = settings.RELATIONSHIP_WINDOW_DAYS
            if upcoming_horizon_days is None:
                upcoming_horizon_days = settings.UPCOMING_DATES_HORIZON_DAYS

        self._store = store
        self._clock = clock
        self._relationship_window_days = relationship_window_days
        self._upcoming_horizon_days = upcoming_horizon_days

    def _read(self, what: str, user_id: str, fetch: Callable[[], T]) -> T:
        try:
            return fetch()
        except StoreError as exc:
            logger.error("Failed to read %s for user %s: %s", what, user_id, exc)
            raise

    def _logs(
        self, user_id: str, kind: str, start: datetime, end: datetime,
    ) -> list[ActivityLog]:
        return self._read(
            f"{kind} logs", user_id,
            lambda: self._store.list_activity_logs(user_id, start=start, end=end, kind=kind),
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def relationship_health(
        self, user_id: str, now: datetime | None = None,
    ) -> list[RelationshipHealth]:
        now = now or self._clock.now()
        start, end = trailing_window(now, self._relationship_window_days)
        people = self._read("people", user_id, lambda: self._store.list_people(user_id))
        logs = self._logs(user_id, "goal", start, end)
        return evaluate_relationships(people, logs, now, self._relationship_window_days)

    def balance(self, user_id: str, now: datetime | None = None) -> BalanceReport:
        now = now or self._clock.now()
        start, end = week_bounds(now)
        people = self._read("people", user_id, lambda: self._store.list_people(user_id))
        buckets = build_balance_buckets(
            goal_logs=self._logs(user_id, "goal", start, end),
            exercise_logs=self._logs(user_id, "exercise", start, end),
            downtime_logs=self._logs(user_id, "downtime", start, end),
            screen_logs=self._logs(user_id, "screen_time", start, end),
            people=people,
            now=now,
            window=(start, end),
        )
        return score(buckets)

    def nudges(self, user_id: str, now: datetime | None = None) -> list[Nudge]:
        now = now or self._clock.now()
        start, end = trailing_window(now, LOOKBACK_DAYS)
        people = self._read("people", user_id, lambda: self._store.list_people(user_id))
        return detect_nudges(
            goal_logs=self._logs(user_id, "goal", start, end),
            downtime_logs=self._logs(user_id, "downtime", start, end),
            exercise_logs=self._logs(user_id, "exercise", start, end),
            screen_logs=self._logs(user_id, "screen_time", start, end),
            people=people,
            now=now,
        )

    def drift(self, user_id: str, now: datetime | None = None) -> list[DriftMetric]:
        now = now or self._clock.now()
        start, _ = week_bounds(now, weeks_back=ACTIVITY_BASELINE_WEEKS)
        _, end = week_bounds(now)
        return detect_drift(
            goal_logs=self._logs(user_id, "goal", start, end),
            exercise_logs=self._logs(user_id, "exercise", start, end),
            downtime_logs=self._logs(user_id, "downtime", start, end),
            screen_logs=self._logs(user_id, "screen_time", start, end),
            now=now,
        )

    def goal_progress(self, user_id: str) -> list[GoalProgress]:
        goals = self._read("goals", user_id, lambda: self._store.list_goals(user_id))
        return [goal_progress(g) for g in goals]

    def week_over_week(
        self,
        user_id: str,
        weeks: int = 4,
        offset: int = 0,
        now: datetime | None = None,
    ) -> WeekOverWeek:
        now = now or self._clock.now()
        start, _ = week_bounds(now, weeks_back=offset + weeks - 1)
        _, end = week_bounds(now, weeks_back=offset)
        goals = self._read("goals", user_id, lambda: self._store.list_goals(user_id))
        logs = self._logs(user_id, "goal", start, end)
        return week_over_week(goals, logs, now, weeks=weeks, offset=offset)

    def upcoming(self, user_id: str, now: datetime | None = None) -> list[UpcomingDate]:
        now = now or self._clock.now()
        dates = self._read(
            "important dates", user_id, lambda: self._store.list_important_dates(user_id),
        )
        people = self._read("people", user_id, lambda: self._store.list_people(user_id))
        return upcoming_dates(dates, people, now, self._upcoming_horizon_days)

    def dashboard(self, user_id: str) -> Dashboard:
        """All views, computed against a single reading of the clock."""
        now = self._clock.now()
        dashboard = Dashboard(
            user_id=user_id,
            generated_at=now,
            goals=tuple(self.goal_progress(user_id)),
            relationships=tuple(self.relationship_health(user_id, now)),
            upcoming=tuple(self.upcoming(user_id, now)),
            balance=self.balance(user_id, now),
            nudges=tuple(self.nudges(user_id, now)),
            drift=tuple(self.drift(user_id, now)),
        )
        logger.info(
            "Dashboard built for user %s: %d goals, %d people, %d nudges",
            user_id, len(dashboard.goals), len(dashboard.relationships), len(dashboard.nudges),
        )
        return dashboard
