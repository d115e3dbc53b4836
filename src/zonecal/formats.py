from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from . import dates
from .errors import InvalidArgument
from .localizer import DateLocalizer, LocalizerSpec
from .models import DateRange
from .tz import as_zone

# strftime patterns; %-d / %-I are the glibc no-padding forms.
TIME_FORMAT = "%-I:%M %p"
SHORT_DATE_FORMAT = "%m/%d/%Y"


def _time_range_format(value: DateRange, locale: Optional[str], localizer: DateLocalizer) -> str:
    return f"{localizer.format(value.start, TIME_FORMAT, locale)} – {localizer.format(value.end, TIME_FORMAT, locale)}"


def _date_range_format(value: DateRange, locale: Optional[str], localizer: DateLocalizer) -> str:
    start = localizer.format(value.start, "shortDateFormat", locale)
    end = localizer.format(value.end, "shortDateFormat", locale)
    return f"{start} – {end}"


def _week_range_format(value: DateRange, locale: Optional[str], localizer: DateLocalizer) -> str:
    start = localizer.format(value.start, "%B %d", locale)
    end_pattern = "%d" if localizer.eq(value.start, value.end, dates.MONTH) else "%B %d"
    return f"{start} – {localizer.format(value.end, end_pattern, locale)}"


DEFAULT_FORMATS: Dict[str, Any] = {
    "dateFormat": "%d",
    "dayFormat": "%d %a",
    "weekdayFormat": "%a",
    "shortDateFormat": SHORT_DATE_FORMAT,
    "timeGutterFormat": TIME_FORMAT,
    "monthHeaderFormat": "%B %Y",
    "dayHeaderFormat": "%A %b %d",
    "dayRangeHeaderFormat": _week_range_format,
    "agendaHeaderFormat": _date_range_format,
    "agendaDateFormat": "%a %b %d",
    "agendaTimeFormat": TIME_FORMAT,
    "agendaTimeRangeFormat": _time_range_format,
    "eventTimeRangeFormat": _time_range_format,
    "selectRangeFormat": _time_range_format,
}

DEFAULT_MESSAGES: Dict[str, str] = {
    "allDay": "All day",
    "today": "Today",
    "noEvents": "No events found",
    "noEventsInRange": "There are no events scheduled for this time period.",
    "noTitle": "(no title)",
}


@dataclass(frozen=True)
class LocaleDefinition:
    first_day_of_week: int = 0          # Sunday = 0
    formats: Mapping[str, Any] = field(default_factory=dict)


_DAY_FIRST = {
    "shortDateFormat": "%d/%m/%Y",
    "dayHeaderFormat": "%A %d %b",
    "agendaDateFormat": "%a %d %b",
}

LOCALES: Dict[str, LocaleDefinition] = {
    "en-US": LocaleDefinition(0),
    "en-IN": LocaleDefinition(1, _DAY_FIRST),
    "en-GB": LocaleDefinition(1, _DAY_FIRST),
}


def strftime_localizer(
    locales: Optional[Mapping[str, LocaleDefinition]] = None,
    formats: Optional[Mapping[str, Any]] = None,
) -> DateLocalizer:
    """DateLocalizer formatting with ``datetime.strftime`` patterns."""
    locales = dict(LOCALES if locales is None else locales)

    def first_of_week(locale: Optional[str] = None) -> int:
        definition = locales.get(locale or "")
        return definition.first_day_of_week if definition else 0

    def format_value(value: datetime, pattern: str, locale: Optional[str] = None) -> str:
        return value.strftime(pattern)

    return DateLocalizer(
        LocalizerSpec(
            format=format_value,
            first_of_week=first_of_week,
            formats={**DEFAULT_FORMATS, **(formats or {})},
            locale_formats={name: d.formats for name, d in locales.items() if d.formats},
        )
    )


@lru_cache(maxsize=1)
def default_localizer() -> DateLocalizer:
    return strftime_localizer()


def localize(
    instant: Optional[datetime],
    format_key: str,
    tz: Any,
    locale: Optional[str] = None,
    localizer: Optional[DateLocalizer] = None,
) -> str:
    """Format an instant for display in ``tz``; the single formatting entry point for views."""
    if instant is None:
        return ""
    localizer = localizer or default_localizer()
    if instant.tzinfo is None:
        raise InvalidArgument("localize() needs a timezone-aware instant")
    result = localizer.format(instant.astimezone(as_zone(tz)), format_key, locale)
    return "" if result is None else result
