"""
Horizon — SQLite record store.

Goals, people, important dates and activity logs for every user, each row
scoped by user_id. Implements StorePort for the read side; the write side
keeps the derived fields (goal progress, last quality time) up to date.

Timestamps are stored as UTC ISO strings with microseconds so that range
filters can compare them as text.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterator
from zoneinfo import ZoneInfo

from src.core.date_math import parse_date, parse_timestamp
from src.data.models import (
    DATE_TYPES,
    GOAL_CATEGORIES,
    GOAL_UNITS,
    INTENT_TYPES,
    LOG_KINDS,
    RELATIONSHIP_TYPES,
    ActivityLog,
    Goal,
    ImportantDate,
    Person,
)
from src.ports.store_port import StoreError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS goals (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id              TEXT    NOT NULL,
    name                 TEXT    NOT NULL,
    category             TEXT    NOT NULL,
    target_per_week      REAL    NOT NULL,
    current_progress     REAL    NOT NULL DEFAULT 0,
    unit                 TEXT    NOT NULL DEFAULT 'sessions',
    ramp_enabled         INTEGER NOT NULL DEFAULT 0,
    ramp_start           REAL,
    ramp_duration_weeks  INTEGER,
    ramp_current_week    INTEGER,
    created_at           TEXT    NOT NULL
);
CREATE TABLE IF NOT EXISTS people (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id              TEXT    NOT NULL,
    name                 TEXT    NOT NULL,
    relationship         TEXT    NOT NULL,
    last_quality_time    TEXT,
    interests            TEXT    NOT NULL DEFAULT '[]',
    notes                TEXT
);
CREATE TABLE IF NOT EXISTS important_dates (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id              TEXT    NOT NULL,
    person_id            INTEGER,
    title                TEXT    NOT NULL,
    date                 TEXT    NOT NULL,
    date_type            TEXT    NOT NULL DEFAULT 'custom',
    is_recurring         INTEGER NOT NULL DEFAULT 1,
    reminder_days        INTEGER
);
CREATE TABLE IF NOT EXISTS activity_logs (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id              TEXT    NOT NULL,
    kind                 TEXT    NOT NULL,
    logged_at            TEXT    NOT NULL,
    goal_id              INTEGER,
    category             TEXT,
    duration_minutes     INTEGER,
    people_involved      TEXT    NOT NULL DEFAULT '[]',
    intent_type          TEXT,
    notes                TEXT
);
CREATE INDEX IF NOT EXISTS idx_logs_user_time ON activity_logs (user_id, logged_at);
"""


def _check_choice(field: str, value: str | None, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ValueError(f"Invalid {field}: {value!r} (expected one of {', '.join(choices)})")


class HorizonDB:
    """SQLite-backed storage for all of a user's Horizon records."""

    def __init__(self, db_path: str | None = None, tz_name: str | None = None) -> None:
        if db_path is None or tz_name is None:
            from src.config import settings
            db_path = db_path or settings.DATABASE_PATH
            tz_name = tz_name or settings.TIMEZONE

        self._db_path = db_path
        # Naive timestamps handed to the store are read as local time here
        self._tz = ZoneInfo(tz_name)
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success and is always closed."""
        conn: sqlite3.Connection | None = None
        try:
            conn = self._connect()
            with conn:
                yield conn
        except sqlite3.Error as exc:
            logger.error("Store operation failed on %s: %s", self._db_path, exc)
            raise StoreError(str(exc)) from exc
        finally:
            if conn is not None:
                conn.close()

    def _init_db(self) -> None:
        with self._session() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("Horizon tables initialized at %s", self._db_path)

    def _to_utc(self, value: str | datetime) -> str:
        ts = parse_timestamp(value)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=self._tz)
        return ts.astimezone(timezone.utc).isoformat(timespec="microseconds")

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_goal(row: sqlite3.Row) -> Goal:
        return Goal(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            category=row["category"],
            target_per_week=row["target_per_week"],
            current_progress=row["current_progress"],
            unit=row["unit"],
            ramp_enabled=bool(row["ramp_enabled"]),
            ramp_start=row["ramp_start"],
            ramp_duration_weeks=row["ramp_duration_weeks"],
            ramp_current_week=row["ramp_current_week"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> Person:
        return Person(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            relationship=row["relationship"],
            last_quality_time=row["last_quality_time"],
            interests=json.loads(row["interests"]),
            notes=row["notes"],
        )

    @staticmethod
    def _row_to_date(row: sqlite3.Row) -> ImportantDate:
        return ImportantDate(
            id=row["id"],
            user_id=row["user_id"],
            person_id=row["person_id"],
            title=row["title"],
            date=row["date"],
            date_type=row["date_type"],
            is_recurring=bool(row["is_recurring"]),
            reminder_days=row["reminder_days"],
        )

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> ActivityLog:
        return ActivityLog(
            id=row["id"],
            user_id=row["user_id"],
            kind=row["kind"],
            logged_at=row["logged_at"],
            goal_id=row["goal_id"],
            category=row["category"],
            duration_minutes=row["duration_minutes"],
            people_involved=json.loads(row["people_involved"]),
            intent_type=row["intent_type"],
            notes=row["notes"],
        )

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def add_goal(
        self,
        user_id: str,
        name: str,
        category: str,
        target_per_week: float,
        unit: str = "sessions",
        ramp_start: float | None = None,
        ramp_duration_weeks: int | None = None,
    ) -> Goal:
        """Insert a goal. Passing ramp_start and ramp_duration_weeks turns ramping on at week 1."""
        _check_choice("category", category, GOAL_CATEGORIES)
        _check_choice("unit", unit, GOAL_UNITS)
        if target_per_week <= 0:
            raise ValueError(f"target_per_week must be positive, got {target_per_week}")

        ramp_enabled = ramp_start is not None and ramp_duration_weeks is not None
        if ramp_enabled:
            if ramp_start >= target_per_week:
                raise ValueError("ramp_start must be below target_per_week")
            if ramp_duration_weeks < 2:
                raise ValueError("ramp_duration_weeks must be at least 2")
        current_week = 1 if ramp_enabled else None
        created_at = datetime.now(timezone.utc).isoformat(timespec="microseconds")

        with self._session() as conn:
            cursor = conn.execute(
                """
                INSERT INTO goals
                    (user_id, name, category, target_per_week, current_progress, unit,
                     ramp_enabled, ramp_start, ramp_duration_weeks, ramp_current_week,
                     created_at)
                VALUES (?, ?, ?, ?, 0, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, name, category, target_per_week, unit,
                    int(ramp_enabled),
                    ramp_start if ramp_enabled else None,
                    ramp_duration_weeks if ramp_enabled else None,
                    current_week, created_at,
                ),
            )
            goal_id = cursor.lastrowid

        logger.info("Goal added: #%d '%s' (%s, %s/week)", goal_id, name, category, target_per_week)
        return Goal(
            id=goal_id,
            user_id=user_id,
            name=name,
            category=category,
            target_per_week=target_per_week,
            current_progress=0,
            unit=unit,
            ramp_enabled=ramp_enabled,
            ramp_start=ramp_start if ramp_enabled else None,
            ramp_duration_weeks=ramp_duration_weeks if ramp_enabled else None,
            ramp_current_week=current_week,
            created_at=created_at,
        )

    def get_goal(self, user_id: str, goal_id: int) -> Goal | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM goals WHERE id = ? AND user_id = ?", (goal_id, user_id),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_goal(row)

    def list_goals(self, user_id: str, category: str | None = None) -> list[Goal]:
        query = "SELECT * FROM goals WHERE user_id = ?"
        params: list = [user_id]
        if category is not None:
            query += " AND category = ?"
            params.append(category)
        query += " ORDER BY created_at, id"
        with self._session() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_goal(r) for r in rows]

    def update_goal_progress(self, user_id: str, goal_id: int, progress: float) -> None:
        if progress < 0:
            raise ValueError(f"progress must be non-negative, got {progress}")
        with self._session() as conn:
            cursor = conn.execute(
                "UPDATE goals SET current_progress = ? WHERE id = ? AND user_id = ?",
                (progress, goal_id, user_id),
            )
        if cursor.rowcount == 0:
            raise ValueError(f"Goal {goal_id} not found")
        logger.info("Goal #%d progress set to %s", goal_id, progress)

    def advance_ramp_week(self, user_id: str, goal_id: int) -> Goal:
        """Move a ramping goal to its next week, stopping at the last week."""
        goal = self.get_goal(user_id, goal_id)
        if goal is None:
            raise ValueError(f"Goal {goal_id} not found")
        if not goal.ramp_enabled or goal.ramp_current_week is None:
            return goal

        goal.ramp_current_week = min(goal.ramp_current_week + 1, goal.ramp_duration_weeks)
        with self._session() as conn:
            conn.execute(
                "UPDATE goals SET ramp_current_week = ? WHERE id = ?",
                (goal.ramp_current_week, goal_id),
            )
        logger.info(
            "Goal #%d ramp advanced to week %d/%d",
            goal_id, goal.ramp_current_week, goal.ramp_duration_weeks,
        )
        return goal

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def add_person(
        self,
        user_id: str,
        name: str,
        relationship: str,
        interests: list[str] | None = None,
        notes: str | None = None,
    ) -> Person:
        _check_choice("relationship", relationship, RELATIONSHIP_TYPES)
        interests = interests or []
        with self._session() as conn:
            cursor = conn.execute(
                """
                INSERT INTO people (user_id, name, relationship, interests, notes)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, name.strip(), relationship, json.dumps(interests), notes),
            )
            person_id = cursor.lastrowid
        logger.info("Person added: #%d '%s' (%s)", person_id, name, relationship)
        return Person(
            id=person_id,
            user_id=user_id,
            name=name.strip(),
            relationship=relationship,
            interests=interests,
            notes=notes,
        )

    def get_person(self, user_id: str, person_id: int) -> Person | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM people WHERE id = ? AND user_id = ?", (person_id, user_id),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_person(row)

    def list_people(self, user_id: str, relationship: str | None = None) -> list[Person]:
        query = "SELECT * FROM people WHERE user_id = ?"
        params: list = [user_id]
        if relationship is not None:
            query += " AND relationship = ?"
            params.append(relationship)
        query += " ORDER BY name"
        with self._session() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_person(r) for r in rows]

    # ------------------------------------------------------------------
    # Important dates
    # ------------------------------------------------------------------

    def add_important_date(
        self,
        user_id: str,
        title: str,
        when: str | date,
        date_type: str = "custom",
        is_recurring: bool = True,
        person_id: int | None = None,
        reminder_days: int | None = None,
    ) -> ImportantDate:
        """Insert a date. Raises ValueError on a malformed date."""
        _check_choice("date_type", date_type, DATE_TYPES)
        iso = parse_date(when).isoformat()
        with self._session() as conn:
            cursor = conn.execute(
                """
                INSERT INTO important_dates
                    (user_id, person_id, title, date, date_type, is_recurring, reminder_days)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (user_id, person_id, title, iso, date_type, int(is_recurring), reminder_days),
            )
            date_id = cursor.lastrowid
        logger.info("Important date added: #%d '%s' on %s", date_id, title, iso)
        return ImportantDate(
            id=date_id,
            user_id=user_id,
            person_id=person_id,
            title=title,
            date=iso,
            date_type=date_type,
            is_recurring=is_recurring,
            reminder_days=reminder_days,
        )

    def list_important_dates(self, user_id: str) -> list[ImportantDate]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM important_dates WHERE user_id = ? ORDER BY date",
                (user_id,),
            ).fetchall()
        return [self._row_to_date(r) for r in rows]

    # ------------------------------------------------------------------
    # Activity logs
    # ------------------------------------------------------------------

    def log_activity(
        self,
        user_id: str,
        kind: str,
        logged_at: str | datetime | None = None,
        goal_id: int | None = None,
        category: str | None = None,
        duration_minutes: int | None = None,
        people_involved: list[int] | None = None,
        intent_type: str | None = None,
        notes: str | None = None,
    ) -> ActivityLog:
        """Record an activity.

        Goal logs take their category from the goal and add one to its
        progress. Every person named gets their last_quality_time moved up
        to this log's time (never back).
        """
        _check_choice("kind", kind, LOG_KINDS)
        if intent_type is not None:
            _check_choice("intent_type", intent_type, INTENT_TYPES)
        if logged_at is None:
            logged_at = datetime.now(timezone.utc)
        stamp = self._to_utc(logged_at)
        people_involved = list(dict.fromkeys(people_involved or []))

        goal: Goal | None = None
        if kind == "goal":
            if goal_id is None:
                raise ValueError("Goal logs need a goal_id")
            goal = self.get_goal(user_id, goal_id)
            if goal is None:
                raise ValueError(f"Goal {goal_id} not found")
            category = goal.category

        with self._session() as conn:
            cursor = conn.execute(
                """
                INSERT INTO activity_logs
                    (user_id, kind, logged_at, goal_id, category, duration_minutes,
                     people_involved, intent_type, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, kind, stamp, goal_id, category, duration_minutes,
                    json.dumps(people_involved), intent_type, notes,
                ),
            )
            log_id = cursor.lastrowid

            if goal is not None:
                conn.execute(
                    "UPDATE goals SET current_progress = current_progress + 1 WHERE id = ?",
                    (goal.id,),
                )
            for person_id in people_involved:
                conn.execute(
                    """
                    UPDATE people SET last_quality_time = ?
                    WHERE id = ? AND user_id = ?
                      AND (last_quality_time IS NULL OR last_quality_time < ?)
                    """,
                    (stamp, person_id, user_id, stamp),
                )

        logger.info(
            "Activity logged: #%d %s for user %s (%d people)",
            log_id, kind, user_id, len(people_involved),
        )
        return ActivityLog(
            id=log_id,
            user_id=user_id,
            kind=kind,
            logged_at=stamp,
            goal_id=goal_id,
            category=category,
            duration_minutes=duration_minutes,
            people_involved=people_involved,
            intent_type=intent_type,
            notes=notes,
        )

    def list_activity_logs(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        kind: str | None = None,
    ) -> list[ActivityLog]:
        """Logs for a user, optionally within [start, end] and of one kind, oldest first."""
        conditions = ["user_id = ?"]
        params: list = [user_id]
        if start is not None:
            conditions.append("logged_at >= ?")
            params.append(self._to_utc(start))
        if end is not None:
            conditions.append("logged_at <= ?")
            params.append(self._to_utc(end))
        if kind is not None:
            conditions.append("kind = ?")
            params.append(kind)

        query = (
            "SELECT * FROM activity_logs WHERE " + " AND ".join(conditions)
            + " ORDER BY logged_at, id"
        )
        with self._session() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_log(r) for r in rows]

    def delete_activity_log(self, user_id: str, log_id: int) -> bool:
        """Permanently delete a log. Derived fields are left as they are."""
        with self._session() as conn:
            cursor = conn.execute(
                "DELETE FROM activity_logs WHERE id = ? AND user_id = ?", (log_id, user_id),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Activity log #%d deleted", log_id)
        return deleted
