from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from . import dates
from .errors import FormatterContractViolation, InvalidArgument


@dataclass(frozen=True)
class LocalizerSpec:
    """Strategy for a DateLocalizer.

    ``format`` and ``first_of_week`` are required. Every other field
    overrides one operation; anything left as None falls back to the
    built-in implementation.
    """

    format: Optional[Callable[[datetime, str, Optional[str]], Optional[str]]] = None
    first_of_week: Optional[Callable[[Optional[str]], int]] = None
    formats: Mapping[str, Any] = field(default_factory=dict)
    locale_formats: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    merge: Optional[Callable[..., datetime]] = None
    in_range: Optional[Callable[..., bool]] = None
    compare: Optional[Callable[..., int]] = None
    lt: Optional[Callable[..., bool]] = None
    lte: Optional[Callable[..., bool]] = None
    gt: Optional[Callable[..., bool]] = None
    gte: Optional[Callable[..., bool]] = None
    eq: Optional[Callable[..., bool]] = None
    neq: Optional[Callable[..., bool]] = None
    start_of: Optional[Callable[..., datetime]] = None
    end_of: Optional[Callable[..., datetime]] = None
    add: Optional[Callable[..., datetime]] = None
    range: Optional[Callable[..., Any]] = None
    diff: Optional[Callable[..., int]] = None
    ceil: Optional[Callable[..., datetime]] = None
    min: Optional[Callable[..., datetime]] = None
    max: Optional[Callable[..., datetime]] = None
    minutes: Optional[Callable[[datetime], int]] = None
    first_visible_day: Optional[Callable[..., datetime]] = None
    last_visible_day: Optional[Callable[..., datetime]] = None
    visible_days: Optional[Callable[..., Any]] = None
    get_timezone_offset: Optional[Callable[[datetime], int]] = None

    day_span: Optional[Callable[[datetime, datetime], int]] = None
    get_slot_date: Optional[Callable[[datetime, int, int], datetime]] = None
    get_dst_offset: Optional[Callable[[datetime, datetime], int]] = None
    get_total_min: Optional[Callable[[datetime, datetime], int]] = None
    get_minutes_from_midnight: Optional[Callable[[datetime], int]] = None
    continues_prior: Optional[Callable[[datetime, datetime], bool]] = None
    continues_after: Optional[Callable[[datetime, datetime, datetime], bool]] = None
    sort_events: Optional[Callable[[Any, Any], int]] = None
    in_event_range: Optional[Callable[[Any, Any], bool]] = None
    is_same_date: Optional[Callable[[datetime, datetime], bool]] = None
    start_and_end_are_date_only: Optional[Callable[[datetime, datetime], bool]] = None
    browser_tz_offset: Optional[Callable[[], int]] = None


class DateLocalizer:
    """Timezone and locale aware date behaviour shared by every view.

    Primitives come from the LocalizerSpec or from ``zonecal.dates``. The derived
    operations below only call the bound primitives on ``self``, so
    overriding e.g. ``start_of`` changes sorting and range checks too.
    """

    def __init__(self, spec: LocalizerSpec):
        if not callable(spec.format):
            raise InvalidArgument("date localizer `format(..)` must be a function")
        if not callable(spec.first_of_week):
            raise InvalidArgument("date localizer `first_of_week(..)` must be a function")

        self.formats: Mapping[str, Any] = MappingProxyType(dict(spec.formats))
        self.locale_formats: Mapping[str, Mapping[str, Any]] = MappingProxyType(
            {locale: MappingProxyType(dict(overrides)) for locale, overrides in spec.locale_formats.items()}
        )
        self._format = spec.format
        self.start_of_week = spec.first_of_week

        self.start_of = spec.start_of or dates.start_of
        self.end_of = spec.end_of or dates.end_of
        self.add = spec.add or dates.add
        self.range = spec.range or dates.date_range
        self.diff = spec.diff or dates.diff
        self.merge = spec.merge or dates.merge
        self.min = spec.min or dates.min_date
        self.max = spec.max or dates.max_date
        self.minutes = spec.minutes or dates.minutes
        self.get_timezone_offset = spec.get_timezone_offset or dates.get_timezone_offset

        # comparisons floor through self.start_of
        self.compare = spec.compare or self._compare
        self.lt = spec.lt or (lambda a, b, unit=None: self.compare(a, b, unit) < 0)
        self.lte = spec.lte or (lambda a, b, unit=None: self.compare(a, b, unit) <= 0)
        self.gt = spec.gt or (lambda a, b, unit=None: self.compare(a, b, unit) > 0)
        self.gte = spec.gte or (lambda a, b, unit=None: self.compare(a, b, unit) >= 0)
        self.eq = spec.eq or (lambda a, b, unit=None: self.compare(a, b, unit) == 0)
        self.neq = spec.neq or (lambda a, b, unit=None: self.compare(a, b, unit) != 0)
        self.in_range = spec.in_range or self._in_range
        self.ceil = spec.ceil or self._ceil
        self.first_visible_day = spec.first_visible_day or self._first_visible_day
        self.last_visible_day = spec.last_visible_day or self._last_visible_day
        self.visible_days = spec.visible_days or self._visible_days

        self.day_span = spec.day_span or self._day_span
        self.get_slot_date = spec.get_slot_date or self._get_slot_date
        self.get_dst_offset = spec.get_dst_offset or self._get_dst_offset
        self.get_total_min = spec.get_total_min or self._get_total_min
        self.get_minutes_from_midnight = spec.get_minutes_from_midnight or self._get_minutes_from_midnight
        self.continues_prior = spec.continues_prior or self._continues_prior
        self.continues_after = spec.continues_after or self._continues_after
        self.sort_events = spec.sort_events or self._sort_events
        self.in_event_range = spec.in_event_range or self._in_event_range
        self.is_same_date = spec.is_same_date or self._is_same_date
        self.start_and_end_are_date_only = spec.start_and_end_are_date_only or self._start_and_end_are_date_only
        self.segment_offset = spec.browser_tz_offset() if spec.browser_tz_offset else 0

    def formats_for(self, locale: Optional[str]) -> Dict[str, Any]:
        merged = dict(self.formats)
        merged.update(self.locale_formats.get(locale or "", {}))
        return merged

    def format(self, value: Any, fmt: Any, locale: Optional[str] = None) -> Optional[str]:
        """Format ``value`` with a named format key or a literal pattern.

        Returns None only when the strategy declines to format. Any other
        non-string result raises FormatterContractViolation.
        """
        if isinstance(fmt, str):
            fmt = self.formats_for(locale).get(fmt, fmt)
        if callable(fmt):
            result = fmt(value, locale, self)
        else:
            result = self._format(value, fmt, locale)
        if result is not None and not isinstance(result, str):
            raise FormatterContractViolation(
                f"localizer format(..) must return a string or None, got {type(result).__name__}"
            )
        return result

    def _compare(self, a: datetime, b: datetime, unit: Optional[str] = None) -> int:
        if unit is not None:
            a, b = self.start_of(a, unit), self.start_of(b, unit)
        return dates.compare(a, b)

    def _in_range(
        self,
        needle: datetime,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        unit: str = dates.DAY,
    ) -> bool:
        return (start is None or self.gte(needle, start, unit)) and (end is None or self.lte(needle, end, unit))

    def _ceil(self, value: datetime, unit: str) -> datetime:
        floor = self.start_of(value, unit)
        return value if self.eq(floor, value) else self.add(floor, 1, unit)

    def _first_visible_day(self, value: datetime, first_of_week: int = 0) -> datetime:
        return self.start_of(self.start_of(value, dates.MONTH), dates.WEEK, first_of_week)

    def _last_visible_day(self, value: datetime, first_of_week: int = 0) -> datetime:
        return self.end_of(self.end_of(value, dates.MONTH), dates.WEEK, first_of_week)

    def _visible_days(self, value: datetime, first_of_week: int = 0) -> List[datetime]:
        first = self.first_visible_day(value, first_of_week)
        last = self.last_visible_day(value, first_of_week)
        return list(self.range(first, last, dates.DAY))

    # DST handling all goes through get_dst_offset.

    def _get_dst_offset(self, start: datetime, end: datetime) -> int:
        return self.get_timezone_offset(start) - self.get_timezone_offset(end)

    def _get_total_min(self, start: datetime, end: datetime) -> int:
        return self.diff(end, start, dates.MINUTES) + self.get_dst_offset(start, end)

    def _get_minutes_from_midnight(self, value: datetime) -> int:
        day_start = self.start_of(value, dates.DAY)
        return self.diff(value, day_start, dates.MINUTES) + self.get_dst_offset(day_start, value)

    def _get_slot_date(self, day: datetime, minutes_from_midnight: int, offset: int = 0) -> datetime:
        """Instant shown at ``minutes_from_midnight + offset`` on ``day``'s wall clock.

        Slots inside a spring-forward gap land after the gap.
        """
        target = minutes_from_midnight + offset
        day_start = self.start_of(day, dates.DAY)
        elapsed = self.add(day_start, target, dates.MINUTES)
        corrected = self.add(elapsed, -self.get_dst_offset(day_start, elapsed), dates.MINUTES)
        if self.get_minutes_from_midnight(corrected) == target % (24 * 60):
            return corrected
        return elapsed

    def _continues_prior(self, start: datetime, first: datetime) -> bool:
        return self.lt(start, first, dates.DAY)

    def _continues_after(self, start: datetime, end: datetime, last: datetime) -> bool:
        if self.eq(start, end, dates.MINUTES):
            return self.gte(end, last, dates.MINUTES)
        return self.gt(end, last, dates.MINUTES)

    def _day_span(self, start: datetime, end: datetime) -> int:
        """Number of calendar days the interval touches; at least 1."""
        days = self.diff(self.ceil(end, dates.DAY), self.start_of(start, dates.DAY), dates.DAY)
        return max(1, days)

    def _sort_events(self, evt_a: Any, evt_b: Any) -> int:
        start_sort = self.compare(self.start_of(evt_a.start, dates.DAY), self.start_of(evt_b.start, dates.DAY))
        span_a = self.day_span(evt_a.start, evt_a.end)
        span_b = self.day_span(evt_b.start, evt_b.end)
        return (
            start_sort                                      # start day first
            or span_b - span_a                              # longer spans claim the top rows
            or int(bool(evt_b.all_day)) - int(bool(evt_a.all_day))
            or self.compare(evt_a.start, evt_b.start)
            or self.compare(evt_a.end, evt_b.end)
        )

    def _in_event_range(self, event: Any, date_range: Any) -> bool:
        event_start = self.start_of(event.start, dates.DAY)
        starts_before_end = self.lte(event_start, date_range.end, dates.DAY)
        # zero-length events may sit exactly on the range start
        if self.eq(event.start, event.end, dates.MINUTES):
            ends_after_start = self.gte(event.end, date_range.start, dates.MINUTES)
        else:
            ends_after_start = self.gt(event.end, date_range.start, dates.MINUTES)
        return starts_before_end and ends_after_start

    def _is_same_date(self, a: datetime, b: datetime) -> bool:
        return self.eq(a, b, dates.DAY)

    def _start_and_end_are_date_only(self, start: datetime, end: datetime) -> bool:
        return self.eq(start, self.start_of(start, dates.DAY)) and self.eq(end, self.start_of(end, dates.DAY))


class LocalizedView:
    """A localizer pinned to one locale, format overrides and message table."""

    def __init__(
        self,
        localizer: DateLocalizer,
        locale: Optional[str],
        formats: Mapping[str, Any],
        messages: Mapping[str, str],
    ):
        self._localizer = localizer
        self.locale = locale
        self.formats = MappingProxyType(dict(formats))
        self.messages = MappingProxyType(dict(messages))

    def format(self, value: Any, fmt: Any) -> str:
        if isinstance(fmt, str):
            fmt = self.formats.get(fmt, fmt)
        result = self._localizer.format(value, fmt, self.locale)
        return "" if result is None else result

    def start_of_week(self, locale: Optional[str] = None) -> int:
        return self._localizer.start_of_week(locale or self.locale)

    def __getattr__(self, name: str) -> Any:
        # only reached for missing attributes; private ones are never delegated
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._localizer, name)


def merge_with_defaults(
    localizer: DateLocalizer,
    locale: Optional[str],
    format_overrides: Optional[Mapping[str, Any]] = None,
    messages: Optional[Mapping[str, str]] = None,
) -> LocalizedView:
    formats = localizer.formats_for(locale)
    formats.update(format_overrides or {})
    return LocalizedView(localizer, locale, formats, messages or {})
