from __future__ import annotations

from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import Iterator, List, Optional

from dateutil.relativedelta import relativedelta

from .errors import InvalidArgument

MILLISECONDS = "milliseconds"
SECONDS = "seconds"
MINUTES = "minutes"
HOURS = "hours"
DAY = "day"
WEEK = "week"
MONTH = "month"
YEAR = "year"

CLOCK_UNITS = (MILLISECONDS, SECONDS, MINUTES, HOURS)
CALENDAR_UNITS = (DAY, WEEK, MONTH, YEAR)

_ALIASES = {
    "millisecond": MILLISECONDS,
    "ms": MILLISECONDS,
    "second": SECONDS,
    "minute": MINUTES,
    "hour": HOURS,
    "days": DAY,
    "date": DAY,
    "weeks": WEEK,
    "months": MONTH,
    "years": YEAR,
}

_CLOCK_STEP = {
    MILLISECONDS: timedelta(milliseconds=1),
    SECONDS: timedelta(seconds=1),
    MINUTES: timedelta(minutes=1),
    HOURS: timedelta(hours=1),
}

END_OF_UNIT = timedelta(microseconds=1)


def normalize_unit(unit: str) -> str:
    if isinstance(unit, str):
        name = _ALIASES.get(unit, unit)
        if name in CLOCK_UNITS or name in CALENDAR_UNITS:
            return name
    raise InvalidArgument(f"Unknown date unit: {unit!r}")


def _check(value: datetime) -> datetime:
    if not isinstance(value, datetime):
        raise InvalidArgument(f"Expected a datetime, got {type(value).__name__}")
    return value


def _check_pair(a: datetime, b: datetime) -> None:
    _check(a)
    _check(b)
    if (a.tzinfo is None) != (b.tzinfo is None):
        raise InvalidArgument("Cannot mix naive and timezone-aware datetimes")


def _absolute(value: datetime) -> datetime:
    # Same-tzinfo arithmetic in Python is wall-clock arithmetic; go through UTC.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def resolve_wall(value: datetime, fold: int = 0) -> datetime:
    """Pin a wall-clock value onto a real instant in its own zone.

    Repeated times take the occurrence selected by ``fold``. Times skipped
    by a spring-forward jump move forward by the length of the gap.
    """
    if value.tzinfo is None:
        return value
    return value.replace(fold=fold).astimezone(timezone.utc).astimezone(value.tzinfo)


def start_of(value: datetime, unit: str, first_of_week: int = 0) -> datetime:
    """Floor ``value`` to the start of ``unit``.

    ``first_of_week`` uses Sunday = 0 numbering.
    """
    _check(value)
    unit = normalize_unit(unit)
    if unit == MILLISECONDS:
        return value.replace(microsecond=value.microsecond - value.microsecond % 1000)
    if unit == SECONDS:
        return value.replace(microsecond=0)
    if unit == MINUTES:
        return value.replace(second=0, microsecond=0)
    if unit == HOURS:
        return value.replace(minute=0, second=0, microsecond=0)

    wall = value.replace(hour=0, minute=0, second=0, microsecond=0, fold=0)
    if unit == WEEK:
        weekday = wall.isoweekday() % 7
        wall -= timedelta(days=(weekday - first_of_week) % 7)
    elif unit == MONTH:
        wall = wall.replace(day=1)
    elif unit == YEAR:
        wall = wall.replace(month=1, day=1)
    return resolve_wall(wall)


def end_of(value: datetime, unit: str, first_of_week: int = 0) -> datetime:
    """Last microsecond of the ``unit`` containing ``value``."""
    floor = start_of(value, unit, first_of_week)
    last = _absolute(add(floor, 1, unit)) - END_OF_UNIT
    return last if floor.tzinfo is None else last.astimezone(floor.tzinfo)


def ceil(value: datetime, unit: str) -> datetime:
    floor = start_of(value, unit)
    if eq(floor, value):
        return value
    return add(floor, 1, unit)


def add(value: datetime, amount: float, unit: str) -> datetime:
    """Shift ``value`` by ``amount`` units.

    Clock units move elapsed time. Calendar units move the wall clock, so
    adding a day across a DST change keeps the local time of day.
    """
    _check(value)
    unit = normalize_unit(unit)
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise InvalidArgument(f"Amount must be a number, got {amount!r}")
    if unit not in CLOCK_UNITS and not float(amount).is_integer():
        raise InvalidArgument(f"Calendar units need whole amounts, got {amount!r}")
    try:
        if unit in CLOCK_UNITS:
            shifted = _absolute(value) + _CLOCK_STEP[unit] * amount
            return shifted if value.tzinfo is None else shifted.astimezone(value.tzinfo)

        amount = int(amount)
        # relativedelta clamps the day to the target month's length
        step = {
            DAY: relativedelta(days=amount),
            WEEK: relativedelta(weeks=amount),
            MONTH: relativedelta(months=amount),
            YEAR: relativedelta(years=amount),
        }[unit]
        wall = value.replace(fold=0) + step
    except (OverflowError, ValueError) as ex:
        raise InvalidArgument(f"Date out of range adding {amount} {unit}") from ex
    return resolve_wall(wall)


def diff(a: datetime, b: datetime, unit: str = MILLISECONDS, first_of_week: int = 0) -> int:
    """Signed ``a - b`` in whole ``unit``s, after flooring both values to ``unit``."""
    _check_pair(a, b)
    unit = normalize_unit(unit)
    if unit == MILLISECONDS:
        return (_absolute(a) - _absolute(b)) // _CLOCK_STEP[MILLISECONDS]
    if unit in CLOCK_UNITS:
        delta = _absolute(start_of(a, unit)) - _absolute(start_of(b, unit))
        return delta // _CLOCK_STEP[unit]
    if unit == DAY:
        return (a.date() - b.date()).days
    if unit == WEEK:
        days = (start_of(a, WEEK, first_of_week).date() - start_of(b, WEEK, first_of_week).date()).days
        return days // 7
    if unit == MONTH:
        return (a.year * 12 + a.month) - (b.year * 12 + b.month)
    return a.year - b.year


def compare(a: datetime, b: datetime, unit: Optional[str] = None) -> int:
    """-1, 0 or 1 comparing ``a`` with ``b`` at ``unit`` granularity.

    Without a unit the exact instants are compared.
    """
    _check_pair(a, b)
    if unit is not None:
        a, b = start_of(a, unit), start_of(b, unit)
    a, b = _absolute(a), _absolute(b)
    return (a > b) - (a < b)


def eq(a: datetime, b: datetime, unit: Optional[str] = None) -> bool:
    return compare(a, b, unit) == 0


def neq(a: datetime, b: datetime, unit: Optional[str] = None) -> bool:
    return compare(a, b, unit) != 0


def lt(a: datetime, b: datetime, unit: Optional[str] = None) -> bool:
    return compare(a, b, unit) < 0


def lte(a: datetime, b: datetime, unit: Optional[str] = None) -> bool:
    return compare(a, b, unit) <= 0


def gt(a: datetime, b: datetime, unit: Optional[str] = None) -> bool:
    return compare(a, b, unit) > 0


def gte(a: datetime, b: datetime, unit: Optional[str] = None) -> bool:
    return compare(a, b, unit) >= 0


def in_range(
    needle: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    unit: str = DAY,
) -> bool:
    """Inclusive containment; a missing bound leaves that side open."""
    return (start is None or gte(needle, start, unit)) and (end is None or lte(needle, end, unit))


def min_date(*values: datetime) -> datetime:
    if not values:
        raise InvalidArgument("min_date() needs at least one value")
    for value in values:
        _check_pair(values[0], value)
    return min(values, key=_absolute)


def max_date(*values: datetime) -> datetime:
    if not values:
        raise InvalidArgument("max_date() needs at least one value")
    for value in values:
        _check_pair(values[0], value)
    return max(values, key=_absolute)


def merge(date_part: datetime, time_part: datetime) -> datetime:
    """The calendar date of ``date_part`` at the time of day of ``time_part``."""
    _check(date_part)
    _check(time_part)
    wall = date_part.replace(
        hour=time_part.hour,
        minute=time_part.minute,
        second=time_part.second,
        microsecond=time_part.microsecond,
    )
    return resolve_wall(wall)


def minutes(value: datetime) -> int:
    return _check(value).minute


def is_just_date(value: datetime) -> bool:
    _check(value)
    return value.hour == 0 and value.minute == 0 and value.second == 0 and value.microsecond == 0


def get_timezone_offset(value: datetime) -> int:
    """Minutes the value's zone is behind UTC (New York in winter: 300)."""
    _check(value)
    offset = value.utcoffset()
    if offset is None:
        return 0
    return -int(offset // timedelta(minutes=1))


class DateSequence:
    """Finite, re-iterable run of datetimes from ``start`` to ``end`` inclusive."""

    def __init__(self, start: datetime, end: datetime, unit: str = DAY, step: int = 1):
        _check_pair(start, end)
        self.unit = normalize_unit(unit)
        if isinstance(step, bool) or not isinstance(step, Real) or step <= 0:
            raise InvalidArgument(f"Step must be a positive number, got {step!r}")
        self.start = start
        self.end = end
        self.step = step

    def __iter__(self) -> Iterator[datetime]:
        current = self.start
        while lte(current, self.end, self.unit):
            yield current
            current = add(current, self.step, self.unit)

    def __repr__(self) -> str:
        return f"DateSequence({self.start.isoformat()}, {self.end.isoformat()}, {self.unit!r}, {self.step})"


def date_range(start: datetime, end: datetime, unit: str = DAY, step: int = 1) -> DateSequence:
    return DateSequence(start, end, unit, step)


def first_visible_day(value: datetime, first_of_week: int = 0) -> datetime:
    """First cell of the month grid containing ``value``."""
    return start_of(start_of(value, MONTH), WEEK, first_of_week)


def last_visible_day(value: datetime, first_of_week: int = 0) -> datetime:
    return end_of(end_of(value, MONTH), WEEK, first_of_week)


def visible_days(value: datetime, first_of_week: int = 0) -> List[datetime]:
    return list(date_range(first_visible_day(value, first_of_week), last_visible_day(value, first_of_week), DAY))
