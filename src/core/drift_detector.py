"""
Horizon — Life drift detection.

Compares this week with earlier weeks to catch slow shifts nobody notices
day to day: activity creeping later into the evening, fewer workouts, less
rest, more passive scrolling. A metric is only reported once the change
crosses its threshold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable

from src.core.activity_aggregator import filter_window, total_minutes
from src.core.date_math import localize, parse_timestamp, week_bounds
from src.core.ramp_calculator import round_half_up

if TYPE_CHECKING:
    from src.data.models import ActivityLog

logger = logging.getLogger(__name__)

ACTIVITY_SHIFT_MINUTES = 30
DOWNTIME_SHIFT_MINUTES = 30
SCREEN_SHIFT_MINUTES = 30
ACTIVITY_BASELINE_WEEKS = 3


@dataclass(frozen=True)
class DriftMetric:
    id: str
    label: str
    current_value: float
    previous_value: float
    unit: str
    trend: str           # "up" | "down"
    is_positive: bool    # whether this direction is good news
    message: str


def _hours(minutes: float) -> float:
    return round_half_up(minutes / 60, 1)


def _mean_hour(logs: list[ActivityLog], now: datetime) -> float | None:
    if not logs:
        return None
    hours = [localize(parse_timestamp(log.logged_at), now).hour for log in logs]
    return sum(hours) / len(hours)


def _activity_time(
    current: list[ActivityLog], baseline: list[ActivityLog], now: datetime,
) -> DriftMetric | None:
    current_hour = _mean_hour(current, now)
    previous_hour = _mean_hour(baseline, now)
    if current_hour is None or previous_hour is None:
        return None

    shift = int(round_half_up((current_hour - previous_hour) * 60))
    if abs(shift) < ACTIVITY_SHIFT_MINUTES:
        return None
    if shift > 0:
        message = (
            f"Your average activity time has shifted {abs(shift)} minutes later "
            f"over {ACTIVITY_BASELINE_WEEKS} weeks."
        )
    else:
        message = f"You're wrapping up {abs(shift)} minutes earlier on average."
    return DriftMetric(
        id="work-hours",
        label="Activity Time",
        current_value=round_half_up(current_hour, 1),
        previous_value=round_half_up(previous_hour, 1),
        unit="avg hour",
        trend="up" if shift > 0 else "down",
        is_positive=shift < 0,
        message=message,
    )


def _exercise(current: list[ActivityLog], previous: list[ActivityLog]) -> DriftMetric | None:
    diff = len(current) - len(previous)
    if diff == 0:
        return None
    plural = "s" if abs(diff) > 1 else ""
    if diff > 0:
        message = f"{diff} more exercise session{plural} than last week!"
    else:
        message = f"{abs(diff)} fewer session{plural} than last week."
    return DriftMetric(
        id="exercise",
        label="Exercise",
        current_value=len(current),
        previous_value=len(previous),
        unit="sessions",
        trend="up" if diff > 0 else "down",
        is_positive=diff > 0,
        message=message,
    )


def _downtime(current: list[ActivityLog], previous: list[ActivityLog]) -> DriftMetric | None:
    current_total = total_minutes(current)
    previous_total = total_minutes(previous)
    diff = current_total - previous_total
    if abs(diff) < DOWNTIME_SHIFT_MINUTES:
        return None
    if diff > 0:
        message = f"{_hours(diff)} more hours of rest this week."
    else:
        message = f"{_hours(abs(diff))} hours less downtime than last week."
    return DriftMetric(
        id="downtime",
        label="Downtime",
        current_value=_hours(current_total),
        previous_value=_hours(previous_total),
        unit="hours",
        trend="up" if diff > 0 else "down",
        is_positive=diff > 0,
        message=message,
    )


def _passive_screen(current: list[ActivityLog], previous: list[ActivityLog]) -> DriftMetric | None:
    current_passive = total_minutes(log for log in current if log.intent_type == "passive")
    previous_passive = total_minutes(log for log in previous if log.intent_type == "passive")
    diff = current_passive - previous_passive
    if abs(diff) < SCREEN_SHIFT_MINUTES:
        return None
    if diff > 0:
        message = f"Passive screen time up {_hours(diff)} hours from last week."
    else:
        message = f"{_hours(abs(diff))} hours less mindless scrolling!"
    return DriftMetric(
        id="passive-screen",
        label="Passive Scrolling",
        current_value=_hours(current_passive),
        previous_value=_hours(previous_passive),
        unit="hours",
        trend="up" if diff > 0 else "down",
        is_positive=diff < 0,
        message=message,
    )


def detect_drift(
    goal_logs: Iterable[ActivityLog],
    exercise_logs: Iterable[ActivityLog],
    downtime_logs: Iterable[ActivityLog],
    screen_logs: Iterable[ActivityLog],
    now: datetime,
) -> list[DriftMetric]:
    """Metrics that drifted past their threshold, in a fixed order.

    Activity time compares this week against the three weeks before it;
    the other metrics compare this week against last week.
    """
    this_start, this_end = week_bounds(now)
    last_start, last_end = week_bounds(now, weeks_back=1)
    baseline_start, _ = week_bounds(now, weeks_back=ACTIVITY_BASELINE_WEEKS)
    baseline_end = this_start - timedelta(microseconds=1)

    goal_logs = list(goal_logs)
    exercise_logs = list(exercise_logs)
    downtime_logs = list(downtime_logs)
    screen_logs = list(screen_logs)

    candidates = [
        _activity_time(
            filter_window(goal_logs, this_start, this_end),
            filter_window(goal_logs, baseline_start, baseline_end),
            now,
        ),
        _exercise(
            filter_window(exercise_logs, this_start, this_end),
            filter_window(exercise_logs, last_start, last_end),
        ),
        _downtime(
            filter_window(downtime_logs, this_start, this_end),
            filter_window(downtime_logs, last_start, last_end),
        ),
        _passive_screen(
            filter_window(screen_logs, this_start, this_end),
            filter_window(screen_logs, last_start, last_end),
        ),
    ]
    metrics = [m for m in candidates if m is not None]
    logger.debug("Drift metrics: %s", [m.id for m in metrics])
    return metrics
