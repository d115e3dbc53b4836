from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from functools import cmp_to_key
from typing import Any, Iterable, List, Optional, Tuple

from . import dates
from .errors import InvalidArgument
from .formats import default_localizer
from .localizer import DateLocalizer
from .models import DateRange, Event
from .tz import as_zone

VIEWS = ("day", "week", "month", "agenda")
AGENDA_DAYS_TO_SHOW = 30


def _local_midnight(day: date, zone: Any) -> datetime:
    return dates.resolve_wall(datetime.combine(day, time.min, tzinfo=zone))


def display_interval(event: Event, tz: Any) -> Tuple[datetime, datetime]:
    """Start and end of ``event`` on the wall clock of ``tz``.

    All-day events saved with a zone keep their original calendar dates:
    they cover those same dates in the zone being viewed.
    """
    zone = as_zone(tz)
    if event.all_day and event.timezone:
        origin = as_zone(event.timezone)
        first_day = event.start.astimezone(origin).date()
        last_day = event.end.astimezone(origin).date()
        start = _local_midnight(first_day, zone)
        end = dates.end_of(_local_midnight(last_day, zone), dates.DAY)
        return start, end
    return event.start.astimezone(zone), event.end.astimezone(zone)


def _zoned(event: Event, zone: Any) -> Event:
    start, end = display_interval(event, zone)
    return replace(event, start=start, end=end)


def get_events_for_visible_range(
    events: Iterable[Event],
    date_range: DateRange,
    tz: Any,
    localizer: Optional[DateLocalizer] = None,
) -> List[Event]:
    """Events intersecting ``date_range`` in display order.

    Day boundaries are those of ``tz``. The input is left untouched and
    the returned events are the stored ones, not zoned copies.
    """
    localizer = localizer or default_localizer()
    zone = as_zone(tz)
    if date_range.start.tzinfo is None:
        raise InvalidArgument("get_events_for_visible_range() needs a timezone-aware range")
    window = DateRange(date_range.start.astimezone(zone), date_range.end.astimezone(zone))

    visible = []
    for event in events:
        zoned = _zoned(event, zone)
        if localizer.in_event_range(zoned, window):
            visible.append((zoned, event))
    visible.sort(key=cmp_to_key(lambda a, b: localizer.sort_events(a[0], b[0])))
    return [event for _, event in visible]


def _as_local(value: Any, zone: Any) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return dates.resolve_wall(value.replace(tzinfo=zone))
        return value.astimezone(zone)
    if isinstance(value, date):
        return _local_midnight(value, zone)
    raise InvalidArgument(f"Expected a date or datetime, got {type(value).__name__}")


def get_agenda_events_for_day(
    events: Iterable[Event],
    day: Any,
    tz: Any,
    localizer: Optional[DateLocalizer] = None,
) -> List[Event]:
    localizer = localizer or default_localizer()
    zone = as_zone(tz)
    local = _as_local(day, zone)
    window = DateRange(localizer.start_of(local, dates.DAY), localizer.end_of(local, dates.DAY))
    return get_events_for_visible_range(events, window, zone, localizer)


def visible_range(
    view: str,
    current: Any,
    tz: Any,
    localizer: Optional[DateLocalizer] = None,
    locale: Optional[str] = None,
    agenda_days: int = AGENDA_DAYS_TO_SHOW,
) -> DateRange:
    """Window a view shows around ``current`` in ``tz``."""
    localizer = localizer or default_localizer()
    zone = as_zone(tz)
    local = _as_local(current, zone)
    first_of_week = localizer.start_of_week(locale)

    if view == "day":
        return DateRange(localizer.start_of(local, dates.DAY), localizer.end_of(local, dates.DAY))
    if view == "week":
        return DateRange(
            localizer.start_of(local, dates.WEEK, first_of_week),
            localizer.end_of(local, dates.WEEK, first_of_week),
        )
    if view == "month":
        return DateRange(
            localizer.first_visible_day(local, first_of_week),
            localizer.last_visible_day(local, first_of_week),
        )
    if view == "agenda":
        if agenda_days < 1:
            raise InvalidArgument(f"agenda_days must be positive, got {agenda_days!r}")
        last = localizer.add(local, agenda_days - 1, dates.DAY)
        return DateRange(localizer.start_of(local, dates.DAY), localizer.end_of(last, dates.DAY))
    raise InvalidArgument(f"Unknown view {view!r}; expected one of {', '.join(VIEWS)}")
