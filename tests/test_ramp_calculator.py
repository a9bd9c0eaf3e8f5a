"""Tests for src.core.ramp_calculator — ramped weekly targets."""

import pytest

from src.core.ramp_calculator import (
    current_ramped_target,
    default_ramp_start,
    is_ramping,
    ramp_label,
    round_half_up,
)
from src.data.models import Goal


def _goal(**overrides) -> Goal:
    fields = dict(
        id=1,
        user_id="u1",
        name="Date night",
        category="relationship",
        target_per_week=10,
        unit="sessions",
        ramp_enabled=True,
        ramp_start=2,
        ramp_duration_weeks=4,
        ramp_current_week=2,
    )
    fields.update(overrides)
    return Goal(**fields)


class TestCurrentRampedTarget:
    def test_sessions_midway(self):
        target = current_ramped_target(_goal())
        assert target == 6
        assert isinstance(target, int)

    def test_hours_rounded_to_one_decimal(self):
        goal = _goal(target_per_week=5, ramp_start=1, ramp_duration_weeks=3,
                     ramp_current_week=1, unit="hours")
        assert current_ramped_target(goal) == pytest.approx(2.3)

    def test_final_week_reaches_target(self):
        assert current_ramped_target(_goal(ramp_current_week=4)) == 10

    def test_disabled_returns_target_unrounded(self):
        goal = _goal(ramp_enabled=False, target_per_week=7.25, unit="hours")
        assert current_ramped_target(goal) == 7.25

    @pytest.mark.parametrize("missing", ["ramp_start", "ramp_duration_weeks", "ramp_current_week"])
    def test_missing_ramp_field_returns_target(self, missing):
        goal = _goal(**{missing: None})
        assert current_ramped_target(goal) == 10

    def test_zero_start_counts_as_unset(self):
        assert current_ramped_target(_goal(ramp_start=0)) == 10

    def test_sessions_round_half_up(self):
        # 1 + (5 - 1) / 8 * 3 = 2.5 → 3 (banker's rounding would give 2)
        goal = _goal(target_per_week=5, ramp_start=1, ramp_duration_weeks=8, ramp_current_week=3)
        assert current_ramped_target(goal) == 3

    def test_hours_round_half_up(self):
        # 1 + (2 - 1) / 4 * 1 = 1.25 → 1.3
        goal = _goal(target_per_week=2, ramp_start=1, ramp_duration_weeks=4,
                     ramp_current_week=1, unit="hours")
        assert current_ramped_target(goal) == pytest.approx(1.3)

    def test_overshoot_past_duration_is_not_clamped(self):
        assert current_ramped_target(_goal(ramp_current_week=6)) == 14

    @pytest.mark.parametrize("unit", ["sessions", "hours"])
    def test_monotonic_in_current_week(self, unit):
        targets = [
            current_ramped_target(_goal(target_per_week=7, ramp_start=1, ramp_duration_weeks=6,
                                        ramp_current_week=week, unit=unit))
            for week in range(1, 7)
        ]
        assert targets == sorted(targets)

    def test_hours_have_at_most_one_decimal(self):
        for week in range(1, 8):
            goal = _goal(target_per_week=9.5, ramp_start=1.5, ramp_duration_weeks=7,
                         ramp_current_week=week, unit="hours")
            scaled = current_ramped_target(goal) * 10
            assert abs(scaled - round(scaled)) < 1e-9


class TestHelpers:
    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2
        assert round_half_up(0.25, 1) == pytest.approx(0.3)

    def test_is_ramping(self):
        assert is_ramping(_goal()) is True
        assert is_ramping(_goal(ramp_enabled=False)) is False

    def test_default_ramp_start(self):
        assert default_ramp_start(10) == 3
        assert default_ramp_start(5) == 1
        assert default_ramp_start(2) == 1

    def test_ramp_label(self):
        assert ramp_label(_goal()) == "Week 2 of 4"
        assert ramp_label(_goal(ramp_enabled=False)) is None
