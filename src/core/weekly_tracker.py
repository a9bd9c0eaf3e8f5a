"""
Horizon — Weekly goal tracking.

Progress against this week's (possibly ramped) target, and week-over-week
consistency across the last few Monday-start weeks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterable

from src.core.activity_aggregator import GroupBy, aggregate
from src.core.date_math import week_bounds
from src.core.ramp_calculator import current_ramped_target, ramp_label, round_half_up

if TYPE_CHECKING:
    from src.data.models import ActivityLog, Goal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalProgress:
    goal_id: int
    name: str
    category: str
    unit: str
    target: float            # this week's target, ramped when ramping is on
    current: float
    percent: float           # capped at 100
    is_complete: bool
    ramp_label: str | None = None


@dataclass(frozen=True)
class WeekSummary:
    week_start: date
    week_end: date
    total_sessions: int
    completion: int          # sessions as a percentage of all weekly targets


@dataclass(frozen=True)
class GoalTrend:
    goal_id: int
    name: str
    weekly_counts: tuple[int, ...]     # oldest week first
    trend: str                         # "up" | "down" | "stable"


@dataclass(frozen=True)
class WeekOverWeek:
    weeks: tuple[WeekSummary, ...]     # oldest week first
    goals: tuple[GoalTrend, ...]


def goal_progress(goal: Goal) -> GoalProgress:
    """Where a goal stands against this week's target."""
    target = current_ramped_target(goal)
    if target > 0:
        percent = min(round_half_up(goal.current_progress / target * 100, 1), 100)
    else:
        percent = 0
    return GoalProgress(
        goal_id=goal.id,
        name=goal.name,
        category=goal.category,
        unit=goal.unit,
        target=target,
        current=goal.current_progress,
        percent=percent,
        is_complete=target > 0 and goal.current_progress >= target,
        ramp_label=ramp_label(goal),
    )


def trend(counts: Iterable[int]) -> str:
    """Direction of the last two weeks."""
    counts = list(counts)
    if len(counts) < 2:
        return "stable"
    diff = counts[-1] - counts[-2]
    if diff > 0:
        return "up"
    if diff < 0:
        return "down"
    return "stable"


def week_over_week(
    goals: Iterable[Goal],
    goal_logs: Iterable[ActivityLog],
    now: datetime,
    weeks: int = 4,
    offset: int = 0,
) -> WeekOverWeek:
    """Session counts for `weeks` consecutive weeks ending `offset` weeks ago.

    Args:
        goals: Goals to break the counts down by.
        goal_logs: Goal logs covering at least the requested weeks.
        now: Reference instant; week 0 is the week containing it.
        weeks: How many weeks to return.
        offset: How many weeks back the newest returned week is.
    """
    goals = list(goals)
    goal_logs = list(goal_logs)
    total_target = sum(g.target_per_week for g in goals)

    summaries: list[WeekSummary] = []
    per_goal: dict[int, list[int]] = {g.id: [] for g in goals}

    for weeks_back in range(offset + weeks - 1, offset - 1, -1):
        start, end = week_bounds(now, weeks_back=weeks_back)
        by_kind = aggregate(goal_logs, start, end, GroupBy.KIND)
        sessions = by_kind["goal"].count if "goal" in by_kind else 0
        by_goal = aggregate(goal_logs, start, end, GroupBy.GOAL)

        completion = int(round_half_up(sessions / total_target * 100)) if total_target > 0 else 0
        summaries.append(WeekSummary(
            week_start=start.date(),
            week_end=end.date(),
            total_sessions=sessions,
            completion=completion,
        ))
        for goal_id, counts in per_goal.items():
            counts.append(by_goal[goal_id].count if goal_id in by_goal else 0)

    trends = tuple(
        GoalTrend(
            goal_id=g.id,
            name=g.name,
            weekly_counts=tuple(per_goal[g.id]),
            trend=trend(per_goal[g.id]),
        )
        for g in goals
    )
    logger.debug("Week-over-week for %d weeks (offset %d)", weeks, offset)
    return WeekOverWeek(weeks=tuple(summaries), goals=trends)
