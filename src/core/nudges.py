"""
Horizon — Smart nudges.

Looks at the past week for patterns worth a gentle word: late nights, too
little rest, people going unseen, skipped exercise, passive scrolling.

Every rule is independent and may fire or not; the caller decides how many
to show.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from src.core.activity_aggregator import filter_window, total_minutes
from src.core.date_math import NEVER, days_since, localize, parse_timestamp, trailing_window
from src.core.ramp_calculator import round_half_up

if TYPE_CHECKING:
    from src.data.models import ActivityLog, Person

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 7
LATE_HOUR = 21
LATE_NIGHTS_THRESHOLD = 4
MIN_DAILY_DOWNTIME_MINUTES = 30
PARTNER_NEGLECT_DAYS = 10
FAMILY_NEGLECT_DAYS = 14
FAMILY_RELATIONSHIPS = ("child", "parent", "sibling")
MIN_WEEKLY_EXERCISE = 2
PASSIVE_SHARE_THRESHOLD = 0.5


@dataclass(frozen=True)
class Nudge:
    id: str
    message: str
    area: str            # "work" | "rest" | "relationship" | "health"
    severity: str        # "gentle" | "attention"


def _is_neglected(person: Person, now: datetime, threshold_days: int) -> bool:
    days = days_since(person.last_quality_time, now)
    return days == NEVER or days >= threshold_days


def _late_work(goal_logs: list[ActivityLog], now: datetime) -> Nudge | None:
    late = [
        log for log in goal_logs
        if localize(parse_timestamp(log.logged_at), now).hour >= LATE_HOUR
    ]
    if len(late) < LATE_NIGHTS_THRESHOLD:
        return None
    return Nudge(
        id="late-work",
        message=(
            f"You've been active past 9pm {len(late)} times this week. "
            "Consider setting an earlier shutdown time."
        ),
        area="work",
        severity="attention",
    )


def _low_downtime(downtime_logs: list[ActivityLog]) -> Nudge | None:
    daily = total_minutes(downtime_logs) / LOOKBACK_DAYS
    if daily >= MIN_DAILY_DOWNTIME_MINUTES:
        return None
    return Nudge(
        id="low-downtime",
        message=(
            f"You've averaged only {int(round_half_up(daily))} minutes of downtime daily. "
            "Your mind needs rest too."
        ),
        area="rest",
        severity="attention",
    )


def _partner_time(people: list[Person], now: datetime) -> Nudge | None:
    partner = next(
        (p for p in people
         if p.relationship == "partner" and _is_neglected(p, now, PARTNER_NEGLECT_DAYS)),
        None,
    )
    if partner is None:
        return None
    days = days_since(partner.last_quality_time, now)
    shown = "many" if days == NEVER else str(days)
    return Nudge(
        id="partner-time",
        message=f"No 1:1 time with {partner.name} in {shown} days. Small moments matter.",
        area="relationship",
        severity="gentle",
    )


def _family_time(people: list[Person], now: datetime) -> Nudge | None:
    family = [
        p for p in people
        if p.relationship in FAMILY_RELATIONSHIPS
        and _is_neglected(p, now, FAMILY_NEGLECT_DAYS)
    ]
    if not family:
        return None
    names = ", ".join(p.name for p in family[:2])
    more = " and others" if len(family) > 2 else ""
    return Nudge(
        id="family-time",
        message=f"It's been a while since quality time with {names}{more}.",
        area="relationship",
        severity="gentle",
    )


def _low_exercise(exercise_logs: list[ActivityLog]) -> Nudge | None:
    sessions = len(exercise_logs)
    if sessions >= MIN_WEEKLY_EXERCISE:
        return None
    plural = "" if sessions == 1 else "s"
    return Nudge(
        id="low-exercise",
        message=f"Only {sessions} exercise session{plural} this week. Even a short walk counts.",
        area="health",
        severity="gentle",
    )


def _passive_screen(screen_logs: list[ActivityLog]) -> Nudge | None:
    total = total_minutes(screen_logs)
    passive = total_minutes(log for log in screen_logs if log.intent_type == "passive")
    if total <= 0 or passive / total <= PASSIVE_SHARE_THRESHOLD:
        return None
    return Nudge(
        id="passive-screen",
        message=(
            "Over half your screen time this week was passive scrolling. "
            "Notice when drift happens."
        ),
        area="rest",
        severity="gentle",
    )


def detect_nudges(
    goal_logs: Iterable[ActivityLog],
    downtime_logs: Iterable[ActivityLog],
    exercise_logs: Iterable[ActivityLog],
    screen_logs: Iterable[ActivityLog],
    people: Iterable[Person],
    now: datetime,
) -> list[Nudge]:
    """Every nudge that applies to the trailing week, in a fixed rule order."""
    start, end = trailing_window(now, LOOKBACK_DAYS)
    goals = filter_window(goal_logs, start, end)
    downtime = filter_window(downtime_logs, start, end)
    exercise = filter_window(exercise_logs, start, end)
    screen = filter_window(screen_logs, start, end)
    people = list(people)

    candidates = [
        _late_work(goals, now),
        _low_downtime(downtime),
        _partner_time(people, now),
        _family_time(people, now),
        _low_exercise(exercise),
        _passive_screen(screen),
    ]
    nudges = [n for n in candidates if n is not None]
    logger.debug("Detected %d nudges: %s", len(nudges), [n.id for n in nudges])
    return nudges
