"""
Competition Calendar Helpers

Pure functions classifying fixture timestamps against the competition calendar.
All arithmetic is done in UTC:
- Naive datetimes are taken to already be UTC
- Aware datetimes are converted to UTC first

Weekend anchoring collapses Friday/Saturday/Sunday onto the Saturday of that
weekend so fixtures on different days of one weekend compare equal.
"""

import math
from datetime import date, datetime, timedelta, timezone

# datetime.weekday(): Monday=0 ... Sunday=6
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

FRIDAY_EARLIEST_HOUR = 18  # Friday kick-off at/after 18:00
SUNDAY_LATEST_HOUR = 20  # Sunday kick-off at/before 20:00

COMPETITION_MONTHS = (2, 3)  # February, March
OPENING_MONTH = 2


def to_utc(ts: datetime) -> datetime:
    """Normalize a timestamp to UTC (naive values are assumed UTC)."""
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def is_within_allowed_window(ts: datetime) -> bool:
    """
    True if the kick-off falls inside the weekend window:
    Friday from 18:00, any time Saturday, Sunday up to the end of minute 20:00.
    """
    ts = to_utc(ts)
    dow = ts.weekday()
    if dow == FRIDAY:
        return ts.hour >= FRIDAY_EARLIEST_HOUR
    if dow == SATURDAY:
        return True
    if dow == SUNDAY:
        if ts.hour < SUNDAY_LATEST_HOUR:
            return True
        return ts.hour == SUNDAY_LATEST_HOUR and ts.minute == 0
    return False


def is_within_competition_months(ts: datetime) -> bool:
    return to_utc(ts).month in COMPETITION_MONTHS


def weekend_anchor(ts: datetime) -> date:
    """
    Saturday identifying the weekend of ts.

    Friday moves forward one day, Sunday back one day, Saturday is unchanged.
    Monday-Thursday are never scheduled and pass through as their own day.
    """
    ts = to_utc(ts)
    dow = ts.weekday()
    offset = 0
    if dow == FRIDAY:
        offset = 1
    elif dow == SUNDAY:
        offset = -1
    return ts.date() + timedelta(days=offset)


def previous_weekend_anchor(ts: datetime) -> date:
    """Anchor of the weekend immediately before the weekend of ts."""
    return weekend_anchor(ts) - timedelta(days=7)


def week_of_month(ts: datetime) -> int:
    """1-based week index within the month: ceil(day / 7)."""
    return math.ceil(to_utc(ts).day / 7)


def format_weekend(anchor: date) -> str:
    return anchor.isoformat()
