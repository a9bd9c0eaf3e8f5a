"""Tests for src.core.nudges."""

from datetime import timedelta

from src.core.nudges import detect_nudges
from src.data.models import ActivityLog, Person
from tests.conftest import NOW


def _log(log_id, kind, logged_at, minutes=None, **kw) -> ActivityLog:
    return ActivityLog(id=log_id, user_id="u1", kind=kind, logged_at=logged_at,
                       duration_minutes=minutes, **kw)


def _person(person_id, name, relationship, days_ago=None) -> Person:
    last = (NOW - timedelta(days=days_ago)).isoformat() if days_ago is not None else None
    return Person(id=person_id, user_id="u1", name=name, relationship=relationship,
                  last_quality_time=last)


# Enough rest and exercise that those rules stay quiet
_CALM_DOWNTIME = [_log(100, "downtime", "2025-03-24T20:00:00+00:00", minutes=300)]
_CALM_EXERCISE = [
    _log(101, "exercise", "2025-03-22T08:00:00+00:00"),
    _log(102, "exercise", "2025-03-25T08:00:00+00:00"),
]


def _ids(nudges):
    return [n.id for n in nudges]


def _detect(now, goal_logs=(), downtime=None, exercise=None, screen=(), people=()):
    return detect_nudges(
        goal_logs=goal_logs,
        downtime_logs=_CALM_DOWNTIME if downtime is None else downtime,
        exercise_logs=_CALM_EXERCISE if exercise is None else exercise,
        screen_logs=screen,
        people=people,
        now=now,
    )


class TestDetectNudges:
    def test_quiet_week_has_no_nudges(self, now):
        assert _detect(now) == []

    def test_late_work(self, now):
        logs = [_log(i, "goal", f"2025-03-{20 + i}T21:30:00+00:00") for i in range(4)]
        [nudge] = _detect(now, goal_logs=logs)
        assert nudge.id == "late-work"
        assert nudge.severity == "attention"
        assert "4 times" in nudge.message

    def test_three_late_nights_are_fine(self, now):
        logs = [_log(i, "goal", f"2025-03-{20 + i}T22:00:00+00:00") for i in range(3)]
        logs.append(_log(9, "goal", "2025-03-24T20:59:00+00:00"))
        assert _detect(now, goal_logs=logs) == []

    def test_low_downtime_reports_daily_average(self, now):
        downtime = [_log(1, "downtime", "2025-03-24T20:00:00+00:00", minutes=70)]
        [nudge] = _detect(now, downtime=downtime)
        assert nudge.id == "low-downtime"
        assert "only 10 minutes" in nudge.message

    def test_no_downtime_at_all(self, now):
        [nudge] = _detect(now, downtime=[])
        assert "only 0 minutes" in nudge.message

    def test_downtime_outside_trailing_week_does_not_count(self, now):
        downtime = [_log(1, "downtime", "2025-03-18T20:00:00+00:00", minutes=600)]
        assert _ids(_detect(now, downtime=downtime)) == ["low-downtime"]

    def test_partner_time(self, now):
        [nudge] = _detect(now, people=[_person(1, "Sam", "partner", days_ago=12)])
        assert nudge.id == "partner-time"
        assert nudge.message == "No 1:1 time with Sam in 12 days. Small moments matter."

    def test_partner_never_recorded(self, now):
        [nudge] = _detect(now, people=[_person(1, "Sam", "partner")])
        assert "in many days" in nudge.message

    def test_partner_seen_recently(self, now):
        assert _detect(now, people=[_person(1, "Sam", "partner", days_ago=9)]) == []

    def test_family_time_names_first_two(self, now):
        people = [
            _person(1, "Mum", "parent", days_ago=20),
            _person(2, "Dad", "parent"),
            _person(3, "Lee", "sibling", days_ago=30),
            _person(4, "Jo", "friend", days_ago=90),
        ]
        [nudge] = _detect(now, people=people)
        assert nudge.id == "family-time"
        assert nudge.message == "It's been a while since quality time with Mum, Dad and others."

    def test_family_time_single_person(self, now):
        [nudge] = _detect(now, people=[_person(1, "Kit", "child", days_ago=14)])
        assert nudge.message == "It's been a while since quality time with Kit."

    def test_low_exercise(self, now):
        exercise = [_log(1, "exercise", "2025-03-25T07:00:00+00:00")]
        [nudge] = _detect(now, exercise=exercise)
        assert nudge.id == "low-exercise"
        assert nudge.message.startswith("Only 1 exercise session this week")

    def test_passive_screen(self, now):
        screen = [
            _log(1, "screen_time", "2025-03-25T22:00:00+00:00", minutes=90, intent_type="passive"),
            _log(2, "screen_time", "2025-03-24T22:00:00+00:00", minutes=60, intent_type="intentional"),
        ]
        [nudge] = _detect(now, screen=screen)
        assert nudge.id == "passive-screen"

    def test_even_split_screen_time_is_fine(self, now):
        screen = [
            _log(1, "screen_time", "2025-03-25T22:00:00+00:00", minutes=60, intent_type="passive"),
            _log(2, "screen_time", "2025-03-24T22:00:00+00:00", minutes=60, intent_type="intentional"),
        ]
        assert _detect(now, screen=screen) == []

    def test_rules_report_in_fixed_order(self, now):
        late = [_log(i, "goal", f"2025-03-{20 + i}T23:00:00+00:00") for i in range(5)]
        screen = [_log(50, "screen_time", "2025-03-25T22:00:00+00:00", intent_type="passive")]
        nudges = _detect(
            now,
            goal_logs=late,
            downtime=[],
            exercise=[],
            screen=screen,
            people=[_person(1, "Sam", "partner"), _person(2, "Mum", "parent")],
        )
        assert _ids(nudges) == [
            "late-work", "low-downtime", "partner-time",
            "family-time", "low-exercise", "passive-screen",
        ]
