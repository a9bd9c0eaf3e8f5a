"""
Horizon — Life balance score.

Splits the week's logged minutes into four life areas (work, relationships,
health, rest), expresses each as a share of the total, and picks a single
overall insight with a first-match rule chain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from src.core.activity_aggregator import (
    DEFAULT_DURATION_MINUTES,
    filter_window,
    total_minutes,
)
from src.core.date_math import NEVER, days_since, week_bounds
from src.core.ramp_calculator import round_half_up

if TYPE_CHECKING:
    from src.data.models import ActivityLog, Person

logger = logging.getLogger(__name__)

BALANCE_AREAS = ("work", "relationships", "health", "rest")

AREA_LABELS = {
    "work": "Work",
    "relationships": "Relationships",
    "health": "Health",
    "rest": "Rest",
}

# Assumed-ideal share of the week (percent). Work is judged on its own scale.
IDEAL_SHARES = {"relationships": 25, "health": 20, "rest": 25}

# Per-area nudge: (fires when share is below/above, threshold, message)
AREA_INSIGHTS = {
    "work": ("above", 50, "Work is dominating your week."),
    "relationships": ("below", 15, "Relationships need more attention."),
    "health": ("below", 10, "Your body is being neglected."),
    "rest": ("below", 15, "Rest is being neglected this week."),
}

_THRIVING_RATIO = 0.8
_BALANCED_RATIO = 0.4
_WORK_DOMINANT = 50
_WORK_BALANCED = 20

# Credit for each person seen in the last week, in minutes.
_RECENT_CONNECTION_MINUTES = DEFAULT_DURATION_MINUTES
_RECENT_CONNECTION_DAYS = 7
# Intentional screen time counts half towards rest.
_INTENTIONAL_SCREEN_WEIGHT = 0.5


class AreaStatus(Enum):
    THRIVING = "thriving"
    BALANCED = "balanced"
    NEGLECTED = "neglected"


@dataclass(frozen=True)
class BalanceBuckets:
    """Minutes attributed to each life area."""

    work: float = 0
    relationships: float = 0
    health: float = 0
    rest: float = 0


@dataclass(frozen=True)
class AreaScore:
    area: str
    label: str
    minutes: float
    percentage: int          # share of the grand total, 0 when the total is 0
    value: int               # percentage capped at 100
    display_width: float    # value relative to the largest area, 0-100
    status: AreaStatus
    insight: str | None = None


@dataclass(frozen=True)
class BalanceReport:
    areas: tuple[AreaScore, ...]
    total_minutes: float
    insight: str


def area_status(area: str, percentage: float) -> AreaStatus:
    """Qualitative status of one area from its share of the week."""
    if area == "work":
        if percentage > _WORK_DOMINANT:
            return AreaStatus.THRIVING
        if percentage > _WORK_BALANCED:
            return AreaStatus.BALANCED
        return AreaStatus.NEGLECTED

    ideal = IDEAL_SHARES[area]
    if percentage >= ideal * _THRIVING_RATIO:
        return AreaStatus.THRIVING
    if percentage >= ideal * _BALANCED_RATIO:
        return AreaStatus.BALANCED
    return AreaStatus.NEGLECTED


def _area_insight(area: str, percentage: float) -> str | None:
    direction, threshold, message = AREA_INSIGHTS[area]
    if direction == "above" and percentage > threshold:
        return message
    if direction == "below" and percentage < threshold:
        return message
    return None


def overall_insight(areas: Iterable[AreaScore], total: float) -> str:
    """First matching rule wins."""
    areas = list(areas)
    neglected = [a for a in areas if a.status is AreaStatus.NEGLECTED]
    thriving = [a for a in areas if a.status is AreaStatus.THRIVING]
    work = next((a for a in areas if a.area == "work"), None)

    if total == 0:
        return "No activity logged yet this week. Start tracking to see your balance."
    if len(neglected) >= 2:
        names = " and ".join(a.label for a in neglected)
        return f"{names} need more attention this week."
    if len(neglected) == 1:
        return f"{neglected[0].label} is being neglected. Consider making time for it."
    if len(thriving) == len(areas):
        return "Beautiful balance this week. You're investing across all areas."
    if work is not None and work.percentage > _WORK_DOMINANT:
        return "Work is taking up most of your energy. Is that intentional?"
    return "Your week looks reasonably balanced. Keep noticing what feels right."


def score(buckets: BalanceBuckets) -> BalanceReport:
    """Percentages, statuses and the overall insight for four area totals."""
    minutes = {area: getattr(buckets, area) for area in BALANCE_AREAS}
    total = sum(minutes.values())

    percentages = {
        area: int(round_half_up(minutes[area] / total * 100)) if total > 0 else 0
        for area in BALANCE_AREAS
    }
    values = {area: min(pct, 100) for area, pct in percentages.items()}
    widest = max(max(values.values()), 1)

    areas = tuple(
        AreaScore(
            area=area,
            label=AREA_LABELS[area],
            minutes=minutes[area],
            percentage=percentages[area],
            value=values[area],
            display_width=round_half_up(values[area] / widest * 100, 1),
            status=area_status(area, percentages[area]),
            insight=_area_insight(area, percentages[area]),
        )
        for area in BALANCE_AREAS
    )
    insight = overall_insight(areas, total)
    logger.debug("Balance over %.0f minutes: %s", total, percentages)
    return BalanceReport(areas=areas, total_minutes=total, insight=insight)


def build_balance_buckets(
    goal_logs: Iterable[ActivityLog],
    exercise_logs: Iterable[ActivityLog],
    downtime_logs: Iterable[ActivityLog],
    screen_logs: Iterable[ActivityLog],
    people: Iterable[Person],
    now: datetime,
    window: tuple[datetime, datetime] | None = None,
) -> BalanceBuckets:
    """Attribute a window's logs (default: the current week) to the four areas.

    Relationships also earn a fixed credit for every person whose last
    quality time falls within the past week.
    """
    start, end = window or week_bounds(now)
    goals = filter_window(goal_logs, start, end)

    def _goal_minutes(*categories: str) -> float:
        return total_minutes(log for log in goals if log.category in categories)

    recent_connections = sum(
        1 for person in people
        if days_since(person.last_quality_time, now) != NEVER
        and days_since(person.last_quality_time, now) <= _RECENT_CONNECTION_DAYS
    )

    intentional_screen = total_minutes(
        log for log in filter_window(screen_logs, start, end)
        if log.intent_type == "intentional"
    )

    return BalanceBuckets(
        work=_goal_minutes("work"),
        relationships=(
            _goal_minutes("relationship", "kids")
            + recent_connections * _RECENT_CONNECTION_MINUTES
        ),
        health=(
            total_minutes(filter_window(exercise_logs, start, end))
            + _goal_minutes("health")
        ),
        rest=(
            total_minutes(filter_window(downtime_logs, start, end))
            + intentional_screen * _INTENTIONAL_SCREEN_WEIGHT
        ),
    )
