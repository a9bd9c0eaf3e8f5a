"""Goal ramping — pure business logic.

A ramped goal starts below its full weekly target and climbs linearly to it
over a fixed number of weeks. The current week is advanced by the store;
this module only turns the stored configuration into this week's target.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.data.models import Goal

logger = logging.getLogger(__name__)

# Share of the full target a template goal starts at when ramping is switched on.
_TEMPLATE_START_SHARE = 0.3


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round with ties going up (2.5 → 3, 2.25 → 2.3), unlike round()."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def is_ramping(goal: Goal) -> bool:
    """True when ramping is on and every ramp field is set.

    A zero start, duration or week counts as unset.
    """
    return bool(
        goal.ramp_enabled
        and goal.ramp_start
        and goal.ramp_duration_weeks
        and goal.ramp_current_week
    )


def current_ramped_target(goal: Goal) -> float:
    """This week's target for a goal.

    Without a complete ramp configuration the stored target is returned
    as-is. Otherwise the target is interpolated linearly from ramp_start,
    then rounded to a whole number for sessions or to one decimal for hours.

    A current week past the ramp duration keeps interpolating past the
    full target; the store owns that invariant.
    """
    if not is_ramping(goal):
        return goal.target_per_week

    increment = (goal.target_per_week - goal.ramp_start) / goal.ramp_duration_weeks
    raw_target = goal.ramp_start + increment * goal.ramp_current_week

    if goal.unit == "sessions":
        target = int(round_half_up(raw_target))
    else:
        target = round_half_up(raw_target, 1)

    logger.debug(
        "Goal #%s ramp week %d/%d: %.3f → %s %s",
        goal.id, goal.ramp_current_week, goal.ramp_duration_weeks,
        raw_target, target, goal.unit,
    )
    return target


def default_ramp_start(target_per_week: float) -> int:
    """Starting value used when a goal template is created with ramping on."""
    return max(1, math.floor(target_per_week * _TEMPLATE_START_SHARE))


def ramp_label(goal: Goal) -> str | None:
    """e.g. "Week 2 of 4", or None for goals that are not ramping."""
    if not is_ramping(goal):
        return None
    return f"Week {goal.ramp_current_week} of {goal.ramp_duration_weeks}"
