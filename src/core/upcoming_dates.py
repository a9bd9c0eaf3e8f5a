"""
Horizon — Upcoming important dates.

Resolves birthdays, anniversaries and custom dates to their next occurrence
and keeps the ones inside the look-ahead horizon, soonest first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterable

from src.core.date_math import days_until, parse_date, resolve_next_occurrence

if TYPE_CHECKING:
    from src.data.models import ImportantDate, Person

URGENT_DAYS = 7
SOON_DAYS = 14


@dataclass(frozen=True)
class UpcomingDate:
    date_id: int
    title: str
    date_type: str
    next_date: date
    days_until: int
    person_name: str | None
    urgency: str         # "urgent" | "soon" | "later"
    label: str           # "Today" | "Tomorrow" | "N days"


def urgency(days: int) -> str:
    if days <= URGENT_DAYS:
        return "urgent"
    if days <= SOON_DAYS:
        return "soon"
    return "later"


def countdown_label(days: int) -> str:
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    return f"{days} days"


def upcoming_dates(
    dates: Iterable[ImportantDate],
    people: Iterable[Person],
    now: date | datetime,
    horizon_days: int = 60,
) -> list[UpcomingDate]:
    """Dates occurring within [today, today + horizon_days], soonest first.

    Recurring dates resolve to their next annual occurrence; one-off dates
    keep their stored day and drop out once past.
    Raises ValueError if a stored date is malformed.
    """
    names = {p.id: p.name for p in people}
    upcoming: list[UpcomingDate] = []

    for item in dates:
        if item.is_recurring:
            next_date = resolve_next_occurrence(item.date, now)
        else:
            next_date = parse_date(item.date)
        days = days_until(item.date, now, recurring=item.is_recurring)
        if not 0 <= days <= horizon_days:
            continue
        upcoming.append(UpcomingDate(
            date_id=item.id,
            title=item.title,
            date_type=item.date_type,
            next_date=next_date,
            days_until=days,
            person_name=names.get(item.person_id),
            urgency=urgency(days),
            label=countdown_label(days),
        ))

    return sorted(upcoming, key=lambda u: u.days_until)
