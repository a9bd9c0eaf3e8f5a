"""Tests for src.core.drift_detector.

NOW is Wednesday 2025-03-26: this week starts Mon 03-24, last week 03-17,
and the three-week activity baseline 03-03.
"""

import pytest

from src.core.drift_detector import detect_drift
from src.data.models import ActivityLog


def _log(log_id, kind, logged_at, minutes=None, **kw) -> ActivityLog:
    return ActivityLog(id=log_id, user_id="u1", kind=kind, logged_at=logged_at,
                       duration_minutes=minutes, **kw)


def _drift(now, goal=(), exercise=(), downtime=(), screen=()):
    return {
        m.id: m
        for m in detect_drift(
            goal_logs=goal, exercise_logs=exercise, downtime_logs=downtime,
            screen_logs=screen, now=now,
        )
    }


class TestActivityTime:
    def test_activity_shifting_later(self, now):
        goal = [
            _log(1, "goal", "2025-03-24T21:00:00+00:00"),
            _log(2, "goal", "2025-03-25T21:00:00+00:00"),
            _log(3, "goal", "2025-03-10T20:00:00+00:00"),
            _log(4, "goal", "2025-03-17T20:00:00+00:00"),
        ]
        metric = _drift(now, goal=goal)["work-hours"]
        assert metric.trend == "up"
        assert metric.is_positive is False
        assert metric.current_value == 21
        assert metric.previous_value == 20
        assert metric.message == (
            "Your average activity time has shifted 60 minutes later over 3 weeks."
        )

    def test_activity_shifting_earlier_is_good_news(self, now):
        goal = [
            _log(1, "goal", "2025-03-24T18:00:00+00:00"),
            _log(2, "goal", "2025-03-05T20:00:00+00:00"),
        ]
        metric = _drift(now, goal=goal)["work-hours"]
        assert metric.trend == "down"
        assert metric.is_positive is True
        assert metric.message == "You're wrapping up 120 minutes earlier on average."

    def test_small_shift_is_not_reported(self, now):
        goal = [
            _log(1, "goal", "2025-03-24T20:00:00+00:00"),
            _log(2, "goal", "2025-03-25T20:00:00+00:00"),
            _log(3, "goal", "2025-03-17T20:00:00+00:00"),
            _log(4, "goal", "2025-03-18T19:00:00+00:00"),
            _log(5, "goal", "2025-03-19T20:00:00+00:00"),
        ]
        assert "work-hours" not in _drift(now, goal=goal)

    def test_no_baseline_no_metric(self, now):
        goal = [_log(1, "goal", "2025-03-24T23:00:00+00:00")]
        assert "work-hours" not in _drift(now, goal=goal)

    def test_logs_older_than_baseline_are_ignored(self, now):
        goal = [
            _log(1, "goal", "2025-03-24T21:00:00+00:00"),
            _log(2, "goal", "2025-03-02T08:00:00+00:00"),
        ]
        assert "work-hours" not in _drift(now, goal=goal)


class TestWeekOverWeekMetrics:
    def test_more_exercise(self, now):
        exercise = [
            _log(1, "exercise", "2025-03-24T07:00:00+00:00"),
            _log(2, "exercise", "2025-03-25T07:00:00+00:00"),
            _log(3, "exercise", "2025-03-26T07:00:00+00:00"),
            _log(4, "exercise", "2025-03-18T07:00:00+00:00"),
        ]
        metric = _drift(now, exercise=exercise)["exercise"]
        assert (metric.current_value, metric.previous_value) == (3, 1)
        assert metric.is_positive is True
        assert metric.message == "2 more exercise sessions than last week!"

    def test_one_fewer_session(self, now):
        exercise = [
            _log(1, "exercise", "2025-03-18T07:00:00+00:00"),
        ]
        metric = _drift(now, exercise=exercise)["exercise"]
        assert metric.trend == "down"
        assert metric.message == "1 fewer session than last week."

    def test_same_exercise_count_not_reported(self, now):
        exercise = [
            _log(1, "exercise", "2025-03-24T07:00:00+00:00"),
            _log(2, "exercise", "2025-03-18T07:00:00+00:00"),
        ]
        assert _drift(now, exercise=exercise) == {}

    def test_more_downtime(self, now):
        downtime = [
            _log(1, "downtime", "2025-03-24T20:00:00+00:00", minutes=120),
            _log(2, "downtime", "2025-03-25T20:00:00+00:00", minutes=60),
            _log(3, "downtime", "2025-03-20T20:00:00+00:00", minutes=90),
        ]
        metric = _drift(now, downtime=downtime)["downtime"]
        assert metric.current_value == 3.0
        assert metric.previous_value == 1.5
        assert metric.message == "1.5 more hours of rest this week."

    def test_small_downtime_change_not_reported(self, now):
        downtime = [
            _log(1, "downtime", "2025-03-24T20:00:00+00:00", minutes=100),
            _log(2, "downtime", "2025-03-20T20:00:00+00:00", minutes=80),
        ]
        assert "downtime" not in _drift(now, downtime=downtime)

    def test_less_passive_scrolling(self, now):
        screen = [
            _log(1, "screen_time", "2025-03-24T22:00:00+00:00", minutes=60, intent_type="passive"),
            _log(2, "screen_time", "2025-03-24T23:00:00+00:00", minutes=300, intent_type="intentional"),
            _log(3, "screen_time", "2025-03-19T22:00:00+00:00", minutes=180, intent_type="passive"),
        ]
        metric = _drift(now, screen=screen)["passive-screen"]
        assert metric.trend == "down"
        assert metric.is_positive is True
        assert metric.current_value == pytest.approx(1.0)
        assert metric.previous_value == pytest.approx(3.0)
        assert metric.message == "2.0 hours less mindless scrolling!"

    def test_metrics_in_fixed_order(self, now):
        metrics = detect_drift(
            goal_logs=[
                _log(1, "goal", "2025-03-24T22:00:00+00:00"),
                _log(2, "goal", "2025-03-12T18:00:00+00:00"),
            ],
            exercise_logs=[_log(3, "exercise", "2025-03-24T07:00:00+00:00")],
            downtime_logs=[_log(4, "downtime", "2025-03-24T20:00:00+00:00", minutes=45)],
            screen_logs=[
                _log(5, "screen_time", "2025-03-24T22:00:00+00:00", minutes=45, intent_type="passive"),
            ],
            now=now,
        )
        assert [m.id for m in metrics] == ["work-hours", "exercise", "downtime", "passive-screen"]
