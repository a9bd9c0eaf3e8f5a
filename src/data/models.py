"""
Horizon — Data Models.

Records as the store hands them over. Timestamps and dates stay ISO-8601
strings here; src.core.date_math parses them when a computation needs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

GOAL_CATEGORIES = ("relationship", "kids", "health", "work", "self")
GOAL_UNITS = ("sessions", "hours")
RELATIONSHIP_TYPES = ("partner", "child", "parent", "sibling", "friend", "other")
LOG_KINDS = ("goal", "exercise", "downtime", "screen_time")
DATE_TYPES = ("birthday", "anniversary", "custom")
INTENT_TYPES = ("intentional", "passive")


@dataclass
class Goal:
    """A weekly goal, optionally ramped up over several weeks.

    The ramp fields are only meaningful when ramp_enabled is True. The
    current week is advanced by the store, never computed here.
    """

    id: int
    user_id: str
    name: str
    category: str                          # one of GOAL_CATEGORIES
    target_per_week: float
    current_progress: float = 0
    unit: str = "sessions"                 # "sessions" | "hours"
    ramp_enabled: bool = False
    ramp_start: float | None = None
    ramp_duration_weeks: int | None = None
    ramp_current_week: int | None = None
    created_at: str = ""


@dataclass
class ActivityLog:
    """One logged activity: a goal session, exercise, downtime or screen time."""

    id: int
    user_id: str
    kind: str                              # one of LOG_KINDS
    logged_at: str                         # ISO timestamp
    goal_id: int | None = None
    category: str | None = None            # goal category, or free-form for self-care
    duration_minutes: int | None = None    # None → DEFAULT_DURATION_MINUTES
    people_involved: list[int] = field(default_factory=list)
    intent_type: str | None = None         # screen time only
    notes: str | None = None


@dataclass
class Person:
    """Someone the user wants to stay close to."""

    id: int
    user_id: str
    name: str
    relationship: str                      # one of RELATIONSHIP_TYPES
    last_quality_time: str | None = None   # ISO timestamp, None if never recorded
    interests: list[str] = field(default_factory=list)
    notes: str | None = None


@dataclass
class ImportantDate:
    """A birthday, anniversary or custom date, optionally tied to a person."""

    id: int
    user_id: str
    title: str
    date: str                              # ISO date YYYY-MM-DD
    date_type: str = "custom"              # one of DATE_TYPES
    is_recurring: bool = True
    person_id: int | None = None
    reminder_days: int | None = None
