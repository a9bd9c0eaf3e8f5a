"""
Horizon — Activity aggregation.

Turns raw activity logs into per-group totals (count, minutes, latest
timestamp) over an inclusive time window. Every awareness feature is built
on top of these totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from src.core.date_math import in_window, localize, parse_timestamp

if TYPE_CHECKING:
    from src.data.models import ActivityLog

logger = logging.getLogger(__name__)

# Minutes credited to a log that was saved without a duration.
DEFAULT_DURATION_MINUTES = 30


class GroupBy(Enum):
    CATEGORY = "category"
    PERSON = "person"
    KIND = "kind"
    GOAL = "goal"


@dataclass(frozen=True)
class GroupTotals:
    """Totals for one group of logs."""

    key: str | int
    count: int
    total_minutes: float
    latest: datetime | None


def effective_minutes(log: ActivityLog) -> float:
    """Logged duration, or DEFAULT_DURATION_MINUTES when none was recorded."""
    if log.duration_minutes is None:
        return DEFAULT_DURATION_MINUTES
    return log.duration_minutes


def total_minutes(logs: Iterable[ActivityLog]) -> float:
    return sum(effective_minutes(log) for log in logs)


def filter_window(
    logs: Iterable[ActivityLog], window_start: datetime, window_end: datetime,
) -> list[ActivityLog]:
    """Logs whose logged_at lies in [window_start, window_end].

    Raises ValueError if a log carries a malformed timestamp.
    """
    return [
        log for log in logs
        if in_window(parse_timestamp(log.logged_at), window_start, window_end)
    ]


def _group_keys(log: ActivityLog, group_by: GroupBy) -> list[str | int]:
    if group_by is GroupBy.PERSON:
        # One log credits every person it names, each with the full duration
        return list(dict.fromkeys(log.people_involved or []))
    if group_by is GroupBy.CATEGORY:
        return [log.category or log.kind]
    if group_by is GroupBy.GOAL:
        return [log.goal_id] if log.goal_id is not None else []
    return [log.kind]


def aggregate(
    logs: Iterable[ActivityLog],
    window_start: datetime,
    window_end: datetime,
    group_by: GroupBy,
) -> dict[str | int, GroupTotals]:
    """Group the logs inside the window and total each group.

    Args:
        logs: Raw activity logs, any order.
        window_start: Inclusive lower bound.
        window_end: Inclusive upper bound.
        group_by: Dimension to group on. Person grouping fans out: a log
            naming three people adds its full duration to all three.

    Returns:
        Mapping of group key → GroupTotals, in order of first appearance.
        Empty when no log falls in the window.
    """
    counts: dict[str | int, int] = {}
    minutes: dict[str | int, float] = {}
    latest: dict[str | int, datetime] = {}

    logs = list(logs)
    in_range = filter_window(logs, window_start, window_end)
    for log in in_range:
        logged_at = localize(parse_timestamp(log.logged_at), window_start)
        for key in _group_keys(log, group_by):
            counts[key] = counts.get(key, 0) + 1
            minutes[key] = minutes.get(key, 0) + effective_minutes(log)
            if key not in latest or logged_at > latest[key]:
                latest[key] = logged_at

    logger.debug(
        "Aggregated %d/%d logs by %s into %d groups",
        len(in_range), len(logs), group_by.value, len(counts),
    )
    return {
        key: GroupTotals(
            key=key,
            count=counts[key],
            total_minutes=minutes[key],
            latest=latest.get(key),
        )
        for key in counts
    }
