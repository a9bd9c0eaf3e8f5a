"""
Horizon — Relationship awareness.

Classifies every person as thriving / connected / missing / unknown from how
recently and how often the user spent time with them. Thresholds depend on
the relationship: a partner unseen for a week is "missing", a friend is not.

Statuses are recomputed from the current data on every call; nothing is
persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from src.core.activity_aggregator import GroupBy, aggregate
from src.core.date_math import NEVER, days_since, trailing_window

if TYPE_CHECKING:
    from src.data.models import ActivityLog, Person

logger = logging.getLogger(__name__)


class RelationshipStatus(Enum):
    THRIVING = "thriving"
    CONNECTED = "connected"
    MISSING = "missing"
    UNKNOWN = "unknown"


# Display rank: neglect first. UNKNOWN is ranked by policy, it has no day count.
STATUS_ORDER = {
    RelationshipStatus.MISSING: 0,
    RelationshipStatus.UNKNOWN: 1,
    RelationshipStatus.CONNECTED: 2,
    RelationshipStatus.THRIVING: 3,
}


@dataclass(frozen=True)
class RelationshipThresholds:
    """Recency/frequency rule set for one kind of relationship."""

    thriving_days: int            # at most this many days since...
    thriving_activities: int      # ...and at least this many shared activities
    connected_days: int           # beyond this it is "missing"
    thriving_insight: str
    connected_insight: str
    missing_insight: str


_PARENT_SIBLING = RelationshipThresholds(
    thriving_days=7,
    thriving_activities=2,
    connected_days=14,
    thriving_insight="Regular connection: {count} interactions this month",
    connected_insight="Last reached out {ago}",
    missing_insight="It's been {days} days. Time to reconnect?",
)

_FRIEND_OTHER = RelationshipThresholds(
    thriving_days=14,
    thriving_activities=2,
    connected_days=30,
    thriving_insight="Active friendship: {count} hangouts this month",
    connected_insight="Connected {ago}",
    missing_insight="{days} days since you connected",
)

RELATIONSHIP_THRESHOLDS: dict[str, RelationshipThresholds] = {
    "partner": RelationshipThresholds(
        thriving_days=2,
        thriving_activities=3,
        connected_days=5,
        thriving_insight="Strong connection: {count} shared moments this month",
        connected_insight="Last connected {ago}",
        missing_insight="{days} days since quality time together",
    ),
    "child": RelationshipThresholds(
        thriving_days=1,
        thriving_activities=5,
        connected_days=3,
        thriving_insight="Lots of quality time: {count} activities together",
        connected_insight="Connected {ago}",
        missing_insight="{days} days since dedicated time",
    ),
    "parent": _PARENT_SIBLING,
    "sibling": _PARENT_SIBLING,
    "friend": _FRIEND_OTHER,
    "other": _FRIEND_OTHER,
}

_UNKNOWN_INSIGHT = "Start tracking quality time with {name}"


@dataclass(frozen=True)
class RelationshipHealth:
    """Display-ready health signal for one person."""

    person_id: int
    person_name: str
    relationship: str
    days_since: int               # NEVER when no interaction was ever recorded
    shared_activities: int
    total_quality_minutes: float
    status: RelationshipStatus
    insight: str


def thresholds_for(relationship: str) -> RelationshipThresholds:
    """Rule set for a relationship type; unlisted types use the friend rules."""
    return RELATIONSHIP_THRESHOLDS.get(relationship, _FRIEND_OTHER)


def _ago(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "yesterday"
    return f"{days} days ago"


def classify(
    days: int, activity_count: int, relationship: str,
) -> RelationshipStatus:
    """Status for one person from days since contact and recent activity count."""
    if days == NEVER:
        return RelationshipStatus.UNKNOWN
    rules = thresholds_for(relationship)
    if days <= rules.thriving_days and activity_count >= rules.thriving_activities:
        return RelationshipStatus.THRIVING
    if days <= rules.connected_days:
        return RelationshipStatus.CONNECTED
    return RelationshipStatus.MISSING


def describe(
    status: RelationshipStatus,
    days: int,
    activity_count: int,
    relationship: str,
    name: str,
) -> str:
    """Human-readable one-liner for a status."""
    if status is RelationshipStatus.UNKNOWN:
        return _UNKNOWN_INSIGHT.format(name=name)
    rules = thresholds_for(relationship)
    template = {
        RelationshipStatus.THRIVING: rules.thriving_insight,
        RelationshipStatus.CONNECTED: rules.connected_insight,
        RelationshipStatus.MISSING: rules.missing_insight,
    }[status]
    return template.format(count=activity_count, days=days, ago=_ago(days), name=name)


def sort_for_display(items: Iterable[RelationshipHealth]) -> list[RelationshipHealth]:
    """Missing first, then unknown, connected, thriving; most overdue first within a status."""
    return sorted(items, key=lambda h: (STATUS_ORDER[h.status], -h.days_since))


def evaluate_relationships(
    people: Iterable[Person],
    goal_logs: Iterable[ActivityLog],
    now: datetime,
    window_days: int = 30,
) -> list[RelationshipHealth]:
    """Relationship health for every person, sorted for display.

    Args:
        people: The user's people.
        goal_logs: Goal logs; only those in the trailing window count, and
            each one counts for every person it names.
        now: Reference instant.
        window_days: Length of the trailing activity window.

    Recency comes from the person's last_quality_time, falling back to the
    latest shared activity inside the window.
    """
    window_start, window_end = trailing_window(now, window_days)
    shared = aggregate(goal_logs, window_start, window_end, GroupBy.PERSON)

    results: list[RelationshipHealth] = []
    for person in people:
        totals = shared.get(person.id)
        count = totals.count if totals else 0
        minutes = totals.total_minutes if totals else 0
        last_contact = person.last_quality_time or (totals.latest if totals else None)

        days = days_since(last_contact, now)
        status = classify(days, count, person.relationship)
        results.append(RelationshipHealth(
            person_id=person.id,
            person_name=person.name,
            relationship=person.relationship,
            days_since=days,
            shared_activities=count,
            total_quality_minutes=minutes,
            status=status,
            insight=describe(status, days, count, person.relationship, person.name),
        ))

    logger.debug("Evaluated relationship health for %d people", len(results))
    return sort_for_display(results)
