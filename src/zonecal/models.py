from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional

from .errors import InvalidArgument

EVENT_COLORS = ("sky", "amber", "violet", "rose", "emerald", "orange")


def _utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Event:
    id: str                     # "" while unsaved
    title: str
    start: datetime             # timezone-aware
    end: datetime               # timezone-aware
    all_day: bool = False
    description: Optional[str] = None
    color: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[str] = None  # zone an all-day event was saved in

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidArgument(f"Event {self.id!r} needs timezone-aware start and end")
        if _utc(self.start) > _utc(self.end):
            raise InvalidArgument(f"Event {self.id!r} ends before it starts")


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise InvalidArgument("DateRange cannot mix naive and aware datetimes")
        start, end = self.start, self.end
        if start.tzinfo is not None:
            start, end = _utc(start), _utc(end)
        if start > end:
            raise InvalidArgument("DateRange start must not be after end")


@dataclass(frozen=True)
class WallClock:
    """Civil date and time with no zone attached.

    ``fold`` follows PEP 495: 1 marks the second occurrence of a repeated
    local time, so a value read from an instant inside a fall-back hour
    converts back to that same instant.
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    microsecond: int = 0
    fold: int = 0

    @classmethod
    def from_datetime(cls, value: datetime) -> "WallClock":
        return cls(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            value.fold,
        )

    @classmethod
    def combine(cls, day: date, clock: time) -> "WallClock":
        return cls.from_datetime(datetime.combine(day, clock))

    def to_datetime(self) -> datetime:
        """Naive datetime carrying the same fields."""
        return datetime(
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minute,
            self.second,
            self.microsecond,
            fold=self.fold,
        )

    def date(self) -> date:
        return date(self.year, self.month, self.day)

    def time(self) -> time:
        return time(self.hour, self.minute, self.second, self.microsecond, fold=self.fold)


@dataclass
class EventForm:
    """Field values of the event edit form, in the selected zone's wall clock."""

    start_date: date
    end_date: date
    start_time: time = time(9, 0)
    end_time: time = time(10, 0)
    all_day: bool = False
    title: str = ""
    description: str = ""
    location: str = ""
    color: str = "sky"
    id: str = ""
