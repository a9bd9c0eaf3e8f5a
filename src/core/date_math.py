"""
Horizon — Date arithmetic.

Recurring-date resolution, days-until / days-since, and the week and
trailing windows every aggregation is computed over.

No I/O and no system time: callers always pass the reference instant.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

# days_since() result when no timestamp was ever recorded. Distinct from 0 ("today").
NEVER = -1


def parse_date(value: str | date | datetime) -> date:
    """Parse an ISO date (or datetime) string into a date.

    Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if "T" in text or " " in text:
        return parse_timestamp(text).date()
    return date.fromisoformat(text)


def parse_timestamp(value: str | date | datetime) -> datetime:
    """Parse an ISO-8601 timestamp. A trailing "Z" is read as UTC.

    Bare dates become midnight. Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _as_datetime(reference: date | datetime) -> datetime:
    if isinstance(reference, datetime):
        return reference
    return datetime.combine(reference, time.min)


def _as_date(reference: date | datetime) -> date:
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def localize(ts: datetime, reference: date | datetime) -> datetime:
    """Express ts in the reference's timezone so the two can be compared.

    Naive values are read as wall-clock time in the reference's zone. A
    naive reference is read as system local time, so aware values are
    converted to it before their offset is dropped.
    """
    ref = _as_datetime(reference)
    if ref.tzinfo is None:
        if ts.tzinfo is None:
            return ts
        return ts.astimezone().replace(tzinfo=None)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=ref.tzinfo)
    return ts.astimezone(ref.tzinfo)


def midnight(reference: date | datetime) -> datetime:
    """Start of the reference's calendar day, keeping its timezone."""
    ref = _as_datetime(reference)
    return ref.replace(hour=0, minute=0, second=0, microsecond=0)


def _on_year(stored: date, year: int) -> date:
    """Month/day of stored in another year. Feb 29 falls back to Feb 28."""
    if stored.month == 2 and stored.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return stored.replace(year=year)


def resolve_next_occurrence(
    value: str | date | datetime, reference_now: date | datetime,
) -> date:
    """Return the next occurrence of an annual date on or after the reference day.

    Only month and day of value matter. Same day counts as today.
    """
    stored = parse_date(value)
    today = _as_date(reference_now)
    candidate = _on_year(stored, today.year)
    if candidate < today:
        candidate = _on_year(stored, today.year + 1)
    return candidate


def days_until(
    value: str | date | datetime,
    reference_now: date | datetime,
    recurring: bool = True,
) -> int:
    """Whole days from the reference day to the date, both taken at midnight.

    Recurring dates resolve to their next occurrence first and are never
    negative. One-off dates are compared as stored and may be negative.
    """
    today = _as_date(reference_now)
    if recurring:
        target = resolve_next_occurrence(value, today)
    else:
        target = parse_date(value)
    return (target - today).days


def days_since(
    timestamp: str | date | datetime | None, reference_now: date | datetime,
) -> int:
    """Whole 24-hour days elapsed since timestamp, or NEVER when it is absent.

    Timestamps in the future count as 0 days.
    """
    if timestamp is None or timestamp == "":
        return NEVER
    now = _as_datetime(reference_now)
    ts = localize(parse_timestamp(timestamp), now)
    return max((now - ts).days, 0)


def week_bounds(
    reference: date | datetime, weeks_back: int = 0,
) -> tuple[datetime, datetime]:
    """Inclusive [Monday 00:00, Sunday 23:59:59.999999] of the reference's week.

    weeks_back shifts the window into the past by whole weeks.
    """
    ref = _as_datetime(reference)
    start = midnight(ref) - timedelta(days=ref.weekday(), weeks=weeks_back)
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def trailing_window(
    reference: date | datetime, days: int,
) -> tuple[datetime, datetime]:
    """The last `days` days up to and including the reference instant."""
    ref = _as_datetime(reference)
    return ref - timedelta(days=days), ref


def in_window(ts: datetime, start: datetime, end: datetime) -> bool:
    """True if ts lies in [start, end] inclusive."""
    ts = localize(ts, start)
    return start <= ts <= end
