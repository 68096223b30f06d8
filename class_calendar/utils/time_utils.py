import os
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum

SCHOOL_UTC_OFFSET_HOURS = float(os.getenv("SCHOOL_UTC_OFFSET_HOURS", "8"))

school_tz = timezone(timedelta(hours=SCHOOL_UTC_OFFSET_HOURS))


def get_school_time():
    return datetime.now(school_tz)


def get_school_date():
    return datetime.now(school_tz).date()


class Weekday(str, Enum):
    """Day names as stored on weekly patterns, numbered Sunday=0 .. Saturday=6."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def day_number(self) -> int:
        return _DAY_NUMBERS[self]

    @classmethod
    def from_number(cls, number: int) -> "Weekday":
        return _DAYS_BY_NUMBER[number % 7]

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        # date.weekday() counts from Monday=0
        return cls.from_number(value.weekday() + 1)


_DAYS_BY_NUMBER = list(Weekday)
_DAY_NUMBERS = {day: number for number, day in enumerate(_DAYS_BY_NUMBER)}


def add_hours(start: time, hours: float) -> time:
    """Return the wall-clock time `hours` after `start`, wrapping past midnight."""
    anchor = datetime.combine(date(2000, 1, 1), start)
    return (anchor + timedelta(hours=hours)).time()


def crosses_midnight(start: time, hours: float) -> bool:
    """True when a span of `hours` from `start` ends on a later day (00:00 included)."""
    anchor = datetime.combine(date(2000, 1, 1), start)
    return (anchor + timedelta(hours=hours)).date() != anchor.date()


def duration_between(start: time, end: time) -> timedelta:
    anchor = date(2000, 1, 1)
    return datetime.combine(anchor, end) - datetime.combine(anchor, start)


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    # Half-open: 10:00-11:00 and 11:00-12:00 do not overlap.
    return start_a < end_b and start_b < end_a
