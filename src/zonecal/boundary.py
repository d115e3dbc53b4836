from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time, timedelta, timezone
from typing import Any

from .errors import AmbiguousLocalTime, EventValidationError, InvalidArgument
from .models import DateRange, Event, EventForm, WallClock
from .tz import as_zone, zone_name

logger = logging.getLogger(__name__)

NORMAL = "normal"
AMBIGUOUS = "ambiguous"        # repeated by a fall-back transition
NONEXISTENT = "nonexistent"    # skipped by a spring-forward transition

END_OF_DAY = time(23, 59, 59, 999000)


def classify_local_time(wall: WallClock, tz: Any) -> str:
    zone = as_zone(tz)
    naive = wall.to_datetime()
    first = naive.replace(tzinfo=zone, fold=0)
    second = naive.replace(tzinfo=zone, fold=1)
    if first.utcoffset() == second.utcoffset():
        return NORMAL
    round_trip = first.astimezone(timezone.utc).astimezone(zone).replace(tzinfo=None, fold=0)
    return AMBIGUOUS if round_trip == naive.replace(fold=0) else NONEXISTENT


def to_instant(wall: WallClock, tz: Any, strict: bool = False) -> datetime:
    """UTC instant for a wall-clock time read in ``tz``.

    Repeated times resolve to the earlier instant unless ``wall.fold`` is 1.
    Skipped times move forward by the length of the gap. With ``strict``
    both cases raise AmbiguousLocalTime instead.
    """
    zone = as_zone(tz)
    kind = classify_local_time(wall, zone)
    if kind != NORMAL:
        if strict:
            raise AmbiguousLocalTime(f"{wall} is {kind} in {zone_name(zone)}", kind)
        logger.debug("Resolving %s local time %s in %s", kind, wall, zone_name(zone))
    fold = wall.fold if kind == AMBIGUOUS else 0
    return wall.to_datetime().replace(tzinfo=zone, fold=fold).astimezone(timezone.utc)


def to_wall_clock(instant: datetime, tz: Any) -> WallClock:
    if instant.tzinfo is None:
        raise InvalidArgument("to_wall_clock() needs a timezone-aware instant")
    return WallClock.from_datetime(instant.astimezone(as_zone(tz)))


def snap_to_increment(value: datetime, minutes: int = 15) -> datetime:
    """Round to the nearest ``minutes`` step; half a step rounds up.

    Values inside a repeated hour stay on the pass (``fold``) they came from.
    """
    if minutes <= 0 or 60 % minutes:
        raise InvalidArgument(f"Snap increment must divide an hour, got {minutes!r}")
    remainder = value.minute % minutes
    wall = value.replace(tzinfo=None, second=0, microsecond=0)
    if remainder * 2 < minutes:
        wall -= timedelta(minutes=remainder)
    else:
        wall += timedelta(minutes=minutes - remainder)
    # timedelta arithmetic resets fold
    if value.tzinfo is None:
        return wall.replace(fold=value.fold)
    snapped = replace(WallClock.from_datetime(wall), fold=value.fold)
    return to_instant(snapped, value.tzinfo).astimezone(value.tzinfo)


def convert_for_save(form: EventForm, tz: Any) -> DateRange:
    """Instants for the form's wall-clock fields.

    ``tz`` may be a zone name or the timezone store; it is read once, here,
    so both ends use the zone selected at save time.
    """
    zone = as_zone(tz)
    if form.all_day:
        start_wall = WallClock.combine(form.start_date, time.min)
        end_wall = WallClock.combine(form.end_date, END_OF_DAY)
    else:
        start_wall = WallClock.combine(form.start_date, form.start_time)
        end_wall = WallClock.combine(form.end_date, form.end_time)

    start = to_instant(start_wall, zone)
    end = to_instant(end_wall, zone)
    if end < start:
        raise EventValidationError("End date cannot be before start date")
    return DateRange(start, end)


def convert_for_edit(event: Event, tz: Any) -> EventForm:
    """Form fields for ``event``.

    All-day events are shown on the dates they were saved with, in the
    zone recorded on the event.
    """
    zone = as_zone(event.timezone if event.all_day and event.timezone else tz)
    start = to_wall_clock(event.start, zone)
    end = to_wall_clock(event.end, zone)
    form = EventForm(
        id=event.id,
        title=event.title,
        description=event.description or "",
        location=event.location or "",
        color=event.color or "sky",
        all_day=event.all_day,
        start_date=start.date(),
        end_date=end.date(),
    )
    if not event.all_day:
        form.start_time = start.time()
        form.end_time = end.time()
    return form
